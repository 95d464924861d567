"""
Run configuration for latency measurements.
"""

from dataclasses import dataclass, field
from typing import Optional

from .errors import ConfigurationError


DEFAULT_TIMEOUT = 3.0
DEFAULT_BENCH_COUNT = 10


@dataclass
class LatencySettings:
    """Options controlling a latency run."""
    timeout: float = DEFAULT_TIMEOUT
    bench: bool = False
    bench_count: int = DEFAULT_BENCH_COUNT
    brute: int = 0  # concurrent probes per domain; 0 disables
    domains: list[str] = field(default_factory=list)
    compare: Optional[str] = None

    def validate(self) -> None:
        """Raise ConfigurationError for unusable values."""
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.bench_count < 1:
            raise ConfigurationError(
                f"bench count must be at least 1, got {self.bench_count}"
            )
        if self.brute < 0:
            raise ConfigurationError(f"brute must be >= 0, got {self.brute}")
        if self.compare is not None and not self.compare.strip():
            raise ConfigurationError("--compare needs a server")
