"""
Repeated-probe benchmarks.

Runs the probe engine N times against the same server and name under
one of two disciplines and reduces the outcomes to success/failure
counts and per-phase averages:

- Serial: one probe after another; successive identical queries expose
  resolver-side caching.
- Concurrent: all N probes in flight at once; exposes how a resolver
  copes with a burst of identical queries.
"""

import asyncio
import logging
from typing import Iterable, Optional, Protocol, Union

from .errors import ConfigurationError, ProbeError
from .models import CONCURRENT, SERIAL, BenchmarkResult, PhaseTimings, ProbeResult
from .query_engine import ProbeEngine


logger = logging.getLogger(__name__)

# Any probe error is a failed attempt; it never aborts a run.
COUNTED_ERRORS = (ProbeError,)

Outcome = Union[PhaseTimings, Exception]


class Prober(Protocol):
    async def probe(self, server: str, qname: str, timeout: float) -> ProbeResult:
        ...


def summarize(
    outcomes: Iterable[Outcome],
    discipline: str = SERIAL,
) -> BenchmarkResult:
    """
    Reduce probe outcomes to a BenchmarkResult.

    Each outcome is either the timings of a successful probe or the
    exception of a failed one. Averages cover successful probes only and
    are all zero when nothing succeeded.
    """
    total = PhaseTimings()
    samples: list[PhaseTimings] = []
    failures = 0

    for outcome in outcomes:
        if isinstance(outcome, Exception):
            failures += 1
            continue
        samples.append(outcome)
        total = total + outcome

    success = len(samples)
    return BenchmarkResult(
        attempts=success + failures,
        success=success,
        failure=failures,
        avg=total.divided(success),
        discipline=discipline,
        samples=samples,
    )


def _check_attempts(n: int) -> None:
    if n < 0:
        raise ConfigurationError(f"attempt count must be >= 0, got {n}")


class SerialBenchmark:
    """Run probes strictly one after another."""

    discipline = SERIAL

    def __init__(self, engine: Optional[Prober] = None):
        self.engine = engine or ProbeEngine()

    async def run(
        self,
        server: str,
        qname: str,
        timeout: float,
        n: int,
    ) -> BenchmarkResult:
        """
        Probe ``server`` for ``qname`` ``n`` times in sequence.

        Returns:
            BenchmarkResult with attempts == n
        """
        _check_attempts(n)

        outcomes: list[Outcome] = []
        for attempt in range(n):
            try:
                result = await self.engine.probe(server, qname, timeout)
            except COUNTED_ERRORS as e:
                logger.debug("serial attempt %d/%d failed: %s", attempt + 1, n, e)
                outcomes.append(e)
                continue
            outcomes.append(result.timings)

        bench = summarize(outcomes, self.discipline)
        logger.info(
            "serial x%d %s @ %s: %d ok, %d failed",
            n, qname, server, bench.success, bench.failure,
        )
        return bench


class ConcurrentBenchmark:
    """Run all probes at once and reduce after every one has finished."""

    discipline = CONCURRENT

    def __init__(self, engine: Optional[Prober] = None):
        self.engine = engine or ProbeEngine()

    async def _probe_into(
        self,
        completed: asyncio.Queue,
        server: str,
        qname: str,
        timeout: float,
    ) -> None:
        try:
            result = await self.engine.probe(server, qname, timeout)
        except COUNTED_ERRORS as e:
            logger.debug("concurrent attempt failed: %s", e)
            completed.put_nowait(e)
            return
        completed.put_nowait(result.timings)

    async def run(
        self,
        server: str,
        qname: str,
        timeout: float,
        n: int,
    ) -> BenchmarkResult:
        """
        Probe ``server`` for ``qname`` with ``n`` simultaneous queries.

        All probes are scheduled before any is awaited; their outcomes go
        into a queue sized to the batch so no probe ever waits on the
        reducer.

        Returns:
            BenchmarkResult with attempts == n
        """
        _check_attempts(n)
        if n == 0:
            return summarize([], self.discipline)

        completed: asyncio.Queue = asyncio.Queue(maxsize=n)
        tasks = [
            asyncio.ensure_future(self._probe_into(completed, server, qname, timeout))
            for _ in range(n)
        ]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        outcomes = [completed.get_nowait() for _ in range(completed.qsize())]

        bench = summarize(outcomes, self.discipline)
        logger.info(
            "concurrent x%d %s @ %s: %d ok, %d failed",
            n, qname, server, bench.success, bench.failure,
        )
        return bench
