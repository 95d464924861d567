"""
Statistics over probe timings.

Calculates:
- Phase distributions: min, mean, median, p95, p99, max, stddev
- Phase-by-phase A/B comparisons of single probes and benchmarks
"""

from dataclasses import dataclass

import numpy as np

from .models import BenchmarkResult, ComparisonRow, PhaseTimings


# (phase key, attribute, notes) in display order
PHASES = [
    ("total", "total_ms", "-"),
    ("dial", "dial_ms", "udp dial to server"),
    ("pack", "pack_ms", "dns message -> wire bytes"),
    ("write", "write_ms", "write query bytes"),
    ("read", "read_ms", "read response bytes"),
    ("unpack", "unpack_ms", "wire bytes -> dns message"),
    ("rtt(approx)", "rtt_approx_ms", "write+read"),
]


@dataclass
class PhaseDistribution:
    """Distribution of one phase across benchmark samples (ms)."""
    phase: str
    count: int
    min_ms: float = 0.0
    mean_ms: float = 0.0
    median_ms: float = 0.0
    p95_ms: float = 0.0
    p99_ms: float = 0.0
    max_ms: float = 0.0
    stddev_ms: float = 0.0


class StatisticsEngine:
    """Calculates distributions and comparisons from timings."""

    @staticmethod
    def phase_distribution(
        samples: list[PhaseTimings],
        attribute: str = "total_ms",
    ) -> PhaseDistribution:
        """
        Calculate the distribution of one phase.

        Args:
            samples: Timings of successful probes
            attribute: PhaseTimings attribute, e.g. ``"rtt_approx_ms"``

        Returns:
            PhaseDistribution; all zero when there are no samples
        """
        phase = attribute.removesuffix("_ms")
        if not samples:
            return PhaseDistribution(phase=phase, count=0)

        values = np.array([getattr(s, attribute) for s in samples])

        return PhaseDistribution(
            phase=phase,
            count=len(values),
            min_ms=float(np.min(values)),
            mean_ms=float(np.mean(values)),
            median_ms=float(np.median(values)),
            p95_ms=float(np.percentile(values, 95)),
            p99_ms=float(np.percentile(values, 99)),
            max_ms=float(np.max(values)),
            stddev_ms=float(np.std(values)),
        )

    @staticmethod
    def compare_timings(a: PhaseTimings, b: PhaseTimings) -> list[ComparisonRow]:
        """Compare two probes phase by phase (lower is better)."""
        return [
            ComparisonRow(
                phase=phase,
                a_ms=getattr(a, attribute),
                b_ms=getattr(b, attribute),
                notes=notes,
            )
            for phase, attribute, notes in PHASES
        ]

    @staticmethod
    def compare_benchmarks(
        a: BenchmarkResult,
        b: BenchmarkResult,
    ) -> list[ComparisonRow]:
        """Compare the averaged phases of two benchmarks."""
        return [
            ComparisonRow(
                phase=f"avg_{phase}",
                a_ms=getattr(a.avg, attribute),
                b_ms=getattr(b.avg, attribute),
                notes=notes,
            )
            for phase, attribute, notes in PHASES
        ]
