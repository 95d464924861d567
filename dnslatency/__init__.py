"""
dns-latency - per-phase DNS resolution timing.

Measures pack, dial, write, read and unpack time of single UDP queries
and benchmarks repeated queries serially or concurrently.
"""

__version__ = "1.0.0"

from .benchmark import ConcurrentBenchmark, SerialBenchmark
from .models import BenchmarkResult, PhaseTimings, ProbeResult
from .query_engine import ProbeEngine
from .runner import LatencyRunner

__all__ = [
    "__version__",
    "BenchmarkResult",
    "PhaseTimings",
    "ProbeResult",
    "ProbeEngine",
    "SerialBenchmark",
    "ConcurrentBenchmark",
    "LatencyRunner",
]
