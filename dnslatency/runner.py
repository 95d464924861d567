"""
Latency run orchestration.

For every query name, takes a one-shot timed probe against the primary
server (and the comparison server, if any), then optionally a serial
benchmark (caching check) and a concurrent one (burst load).
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from .benchmark import ConcurrentBenchmark, Prober, SerialBenchmark
from .errors import ProbeError
from .models import DomainReport, LatencyReport, ProbeFailure, ServerRun
from .query_engine import ProbeEngine, normalize_server
from .settings import LatencySettings
from .workload import default_domains


logger = logging.getLogger(__name__)

# Type for progress callback
ProgressCallback = Callable[[str, int, int], None]


class LatencyRunner:
    """
    Orchestrates probes and benchmarks over a list of names.

    A failed one-shot probe is recorded in the report, never raised.
    """

    def __init__(
        self,
        server: str,
        settings: Optional[LatencySettings] = None,
        engine: Optional[Prober] = None,
    ):
        """
        Initialize the runner.

        Args:
            server: Primary nameserver (``host`` or ``host:port``)
            settings: Run options (defaults if omitted)
            engine: Probe engine shared by all measurements
        """
        self.settings = settings or LatencySettings()
        self.settings.validate()
        self.server = normalize_server(server)
        self.compare = (
            normalize_server(self.settings.compare)
            if self.settings.compare else None
        )
        self.engine = engine or ProbeEngine()
        self.serial = SerialBenchmark(self.engine)
        self.concurrent = ConcurrentBenchmark(self.engine)

    async def probe_once(self, server: str, qname: str) -> ServerRun:
        """Take a single probe, keeping a failure as data."""
        try:
            result = await self.engine.probe(server, qname, self.settings.timeout)
        except ProbeError as e:
            logger.warning("probe %s @ %s failed: %s", qname, server, e)
            return ServerRun(
                server=server,
                failure=ProbeFailure(server=server, qname=qname, error=e),
            )
        return ServerRun(server=server, probe=result)

    async def _benchmarks(self, run: ServerRun, qname: str) -> None:
        timeout = self.settings.timeout

        if self.settings.bench:
            run.serial = await self.serial.run(
                run.server, qname, timeout, self.settings.bench_count
            )

        if self.settings.brute > 0:
            run.concurrent = await self.concurrent.run(
                run.server, qname, timeout, self.settings.brute
            )

    async def run_domain(self, qname: str) -> DomainReport:
        """Measure one name against the primary and comparison servers."""
        report = DomainReport(qname=qname, a=await self.probe_once(self.server, qname))
        if self.compare:
            report.b = await self.probe_once(self.compare, qname)

        await self._benchmarks(report.a, qname)
        if report.b is not None:
            await self._benchmarks(report.b, qname)

        return report

    async def run(
        self,
        domains: Optional[list[str]] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> LatencyReport:
        """
        Measure every name.

        Args:
            domains: Names to query (settings, then the default set)
            progress_callback: Optional callback for progress updates

        Returns:
            LatencyReport with one DomainReport per name
        """
        names = domains or self.settings.domains or default_domains()
        started_at = datetime.now()
        reports = []

        for index, qname in enumerate(names):
            if progress_callback:
                progress_callback(f"Probing {qname}", index, len(names))
            reports.append(await self.run_domain(qname))

        if progress_callback:
            progress_callback("Done", len(names), len(names))

        return LatencyReport(
            started_at=started_at,
            completed_at=datetime.now(),
            server=self.server,
            timeout=self.settings.timeout,
            bench_count=self.settings.bench_count if self.settings.bench else 0,
            brute=self.settings.brute,
            compare=self.compare,
            domains=reports,
        )
