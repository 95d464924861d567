"""
Data models for DNS latency probing.

Defines structured types for single probe results, phase timings,
benchmark aggregates and A/B comparisons.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


NETWORK_UDP = "udp"

SERIAL = "serial"
CONCURRENT = "concurrent"


@dataclass(frozen=True)
class PhaseTimings:
    """Wall-clock duration of each probe phase, in milliseconds."""
    total_ms: float = 0.0
    dial_ms: float = 0.0
    pack_ms: float = 0.0
    write_ms: float = 0.0
    read_ms: float = 0.0
    unpack_ms: float = 0.0

    @property
    def rtt_approx_ms(self) -> float:
        """Write plus read; a proxy for round-trip time."""
        return self.write_ms + self.read_ms

    def __add__(self, other: "PhaseTimings") -> "PhaseTimings":
        return PhaseTimings(
            total_ms=self.total_ms + other.total_ms,
            dial_ms=self.dial_ms + other.dial_ms,
            pack_ms=self.pack_ms + other.pack_ms,
            write_ms=self.write_ms + other.write_ms,
            read_ms=self.read_ms + other.read_ms,
            unpack_ms=self.unpack_ms + other.unpack_ms,
        )

    def divided(self, count: int) -> "PhaseTimings":
        """Divide every phase by ``count``; zero timings when count <= 0."""
        if count <= 0:
            return PhaseTimings()
        return PhaseTimings(
            total_ms=self.total_ms / count,
            dial_ms=self.dial_ms / count,
            pack_ms=self.pack_ms / count,
            write_ms=self.write_ms / count,
            read_ms=self.read_ms / count,
            unpack_ms=self.unpack_ms / count,
        )

    def as_dict(self) -> dict[str, float]:
        return {
            "total": self.total_ms,
            "dial": self.dial_ms,
            "pack": self.pack_ms,
            "write": self.write_ms,
            "read": self.read_ms,
            "unpack": self.unpack_ms,
            "rtt_approx": self.rtt_approx_ms,
        }


@dataclass(frozen=True)
class HeaderFlags:
    """DNS header flags of a response."""
    qr: bool = False
    aa: bool = False
    tc: bool = False
    rd: bool = False
    ra: bool = False
    ad: bool = False
    cd: bool = False

    def __str__(self) -> str:
        return (
            f"QR={self.qr} AA={self.aa} TC={self.tc} RD={self.rd} "
            f"RA={self.ra} AD={self.ad} CD={self.cd}"
        )


@dataclass(frozen=True)
class Answer:
    """An address record from the answer section."""
    value: str
    ttl: int


@dataclass
class ProbeResult:
    """Result of a single timed DNS exchange."""
    server: str
    qname: str
    timeout: float
    timings: PhaseTimings
    network: str = NETWORK_UDP
    local_addr: str = ""
    remote_addr: str = ""

    # Response data
    rcode: str = ""
    msg_id: int = 0
    flags: HeaderFlags = field(default_factory=HeaderFlags)
    answer_count: int = 0
    authority_count: int = 0
    additional_count: int = 0
    query_size: int = 0
    response_size: int = 0
    answers: list[Answer] = field(default_factory=list)


@dataclass
class ProbeFailure:
    """A one-shot probe that did not produce a result."""
    server: str
    qname: str
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error) or type(self.error).__name__


@dataclass
class BenchmarkResult:
    """Aggregate of repeated probes under one discipline."""
    attempts: int
    success: int
    failure: int
    avg: PhaseTimings = field(default_factory=PhaseTimings)
    discipline: str = SERIAL
    samples: list[PhaseTimings] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Percentage of successful attempts."""
        if self.attempts == 0:
            return 0.0
        return (self.success / self.attempts) * 100


@dataclass(frozen=True)
class ComparisonRow:
    """One phase of an A/B comparison; lower is better."""
    phase: str
    a_ms: float
    b_ms: float
    notes: str = "-"

    @property
    def winner(self) -> Optional[str]:
        if self.a_ms == self.b_ms:
            return None
        return "a" if self.a_ms < self.b_ms else "b"


@dataclass
class ServerRun:
    """Everything measured for one server and one query name."""
    server: str
    probe: Optional[ProbeResult] = None
    failure: Optional[ProbeFailure] = None
    serial: Optional[BenchmarkResult] = None
    concurrent: Optional[BenchmarkResult] = None


@dataclass
class DomainReport:
    """Measurements for one query name against one or two servers."""
    qname: str
    a: ServerRun
    b: Optional[ServerRun] = None

    @property
    def is_comparison(self) -> bool:
        return self.b is not None


@dataclass
class LatencyReport:
    """Complete output of a latency run."""
    started_at: datetime
    completed_at: datetime
    server: str
    timeout: float
    bench_count: int
    brute: int
    compare: Optional[str] = None
    domains: list[DomainReport] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()
