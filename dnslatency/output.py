"""
Output formatting for latency reports.

Provides two output formats:
- JSON: Machine-readable full report
- Human-readable: Rich terminal tables, with A/B comparisons colored
  green (lower) and red (higher)
"""

import json
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .models import (
    BenchmarkResult,
    ComparisonRow,
    DomainReport,
    LatencyReport,
    PhaseTimings,
    ProbeFailure,
    SERIAL,
    ProbeResult,
    ServerRun,
)
from .statistics import PHASES, StatisticsEngine


def format_ms(value: float) -> str:
    """Render a millisecond duration."""
    if value == 0:
        return "0s"
    if value < 1:
        return f"{value * 1000:.3f}µs"
    if value >= 1000:
        return f"{value / 1000:.3f}s"
    return f"{value:.3f}ms"


def _round_timings(timings: PhaseTimings) -> dict[str, float]:
    return {k: round(v, 6) for k, v in timings.as_dict().items()}


class JSONOutput:
    """JSON output formatter."""

    @staticmethod
    def probe_data(result: ProbeResult) -> dict:
        return {
            "server": result.server,
            "network": result.network,
            "local": result.local_addr,
            "remote": result.remote_addr,
            "timeout_s": result.timeout,
            "qname": result.qname,
            "qtype": "A",
            "rcode": result.rcode,
            "id": result.msg_id,
            "flags": {
                "qr": result.flags.qr,
                "aa": result.flags.aa,
                "tc": result.flags.tc,
                "rd": result.flags.rd,
                "ra": result.flags.ra,
                "ad": result.flags.ad,
                "cd": result.flags.cd,
            },
            "counts": {
                "answer": result.answer_count,
                "authority": result.authority_count,
                "additional": result.additional_count,
            },
            "sizes": {
                "query": result.query_size,
                "response": result.response_size,
            },
            "answers": [{"value": a.value, "ttl": a.ttl} for a in result.answers],
            "timings_ms": _round_timings(result.timings),
        }

    @staticmethod
    def benchmark_data(bench: BenchmarkResult) -> dict:
        dist = StatisticsEngine.phase_distribution(bench.samples)
        return {
            "discipline": bench.discipline,
            "attempts": bench.attempts,
            "success": bench.success,
            "fail": bench.failure,
            "avg_ms": _round_timings(bench.avg),
            "total_ms": {
                "min": round(dist.min_ms, 6),
                "median": round(dist.median_ms, 6),
                "p95": round(dist.p95_ms, 6),
                "p99": round(dist.p99_ms, 6),
                "max": round(dist.max_ms, 6),
                "stddev": round(dist.stddev_ms, 6),
            },
        }

    @staticmethod
    def run_data(run: ServerRun) -> dict:
        data: dict = {"server": run.server}
        if run.probe is not None:
            data["result"] = JSONOutput.probe_data(run.probe)
        if run.failure is not None:
            data["error"] = run.failure.message
        if run.serial is not None:
            data["bench"] = JSONOutput.benchmark_data(run.serial)
        if run.concurrent is not None:
            data["brute"] = JSONOutput.benchmark_data(run.concurrent)
        return data

    @staticmethod
    def format(report: LatencyReport, indent: int = 2) -> str:
        """
        Format a latency report as JSON.

        Args:
            report: LatencyReport to format
            indent: JSON indentation level

        Returns:
            JSON string
        """
        data = {
            "metadata": {
                "started_at": report.started_at.isoformat(),
                "completed_at": report.completed_at.isoformat(),
                "duration_seconds": report.duration_seconds,
                "server": report.server,
                "compare": report.compare,
                "timeout_s": report.timeout,
                "bench_count": report.bench_count,
                "brute": report.brute,
            },
            "domains": [],
        }

        for domain in report.domains:
            entry = {"qname": domain.qname, "a": JSONOutput.run_data(domain.a)}
            if domain.b is not None:
                entry["b"] = JSONOutput.run_data(domain.b)
            data["domains"].append(entry)

        return json.dumps(data, indent=indent)

    @staticmethod
    def save(report: LatencyReport, path: Path) -> None:
        """Save a latency report to a JSON file."""
        with open(path, "w") as f:
            f.write(JSONOutput.format(report))


def _colored_pair(row: ComparisonRow) -> tuple[str, str]:
    a, b = format_ms(row.a_ms), format_ms(row.b_ms)
    if row.winner is None:
        return f"[grey50]{a}[/grey50]", f"[grey50]{b}[/grey50]"
    if row.winner == "a":
        return f"[green]{a}[/green]", f"[red]{b}[/red]"
    return f"[red]{a}[/red]", f"[green]{b}[/green]"


class RichConsoleOutput:
    """Rich library console output with colors and tables."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_failure(self, failure: ProbeFailure) -> None:
        self.console.print(f"\n[bold]=== {escape(failure.qname)} ===[/bold]")
        self.console.print(f"server:  {escape(failure.server)}")
        self.console.print(f"[red]error:[/red]   {escape(failure.message)}")

    def print_result(self, result: ProbeResult) -> None:
        """Print the response details and timing breakdown of one probe."""
        c = self.console
        c.print(f"\n[bold]=== {escape(result.qname)} ===[/bold]")
        c.print(f"server:   {escape(result.server)}")
        c.print(f"network:  {result.network}")
        c.print(f"local:    {escape(result.local_addr)}")
        c.print(f"remote:   {escape(result.remote_addr)}")
        c.print(f"timeout:  {result.timeout:g}s")
        c.print("qtype:    A")

        c.print("\n[dim]response:[/dim]")
        c.print(f"  rcode:    {result.rcode}")
        c.print(f"  id:       {result.msg_id}")
        c.print(f"  flags:    {result.flags}")
        c.print(
            f"  counts:   answer={result.answer_count} "
            f"authority={result.authority_count} "
            f"additional={result.additional_count}"
        )
        c.print(f"  sizes:    query={result.query_size}B response={result.response_size}B")

        if result.answers:
            c.print("  answers:")
            for answer in result.answers:
                c.print(f"    - {answer.value}  TTL={answer.ttl}")

        table = Table(
            title="Timings (wall-clock)",
            box=box.SIMPLE,
            header_style="bold cyan",
        )
        table.add_column("phase")
        table.add_column("duration", justify="right", style="green")
        table.add_column("notes", style="dim")

        for phase, attribute, notes in PHASES:
            if phase == "rtt(approx)":
                notes = "write+read (useful for caching deltas)"
            table.add_row(phase, format_ms(getattr(result.timings, attribute)), notes)

        c.print(table)

    def print_benchmark(self, label: str, bench: BenchmarkResult) -> None:
        """Print counts, averaged phases and the total distribution."""
        table = Table(title=label, box=box.SIMPLE, header_style="bold magenta")
        table.add_column("metric")
        table.add_column("value", justify="right")

        table.add_row("attempts", str(bench.attempts))
        table.add_row("success", str(bench.success))
        table.add_row("fail", str(bench.failure))
        for phase, attribute, _ in PHASES:
            table.add_row(f"avg_{phase}", format_ms(getattr(bench.avg, attribute)))

        self.console.print(table)

        if bench.samples:
            dist = StatisticsEngine.phase_distribution(bench.samples)
            self.console.print(
                f"  [dim]total:[/dim] min={format_ms(dist.min_ms)} "
                f"p50={format_ms(dist.median_ms)} "
                f"p95={format_ms(dist.p95_ms)} "
                f"p99={format_ms(dist.p99_ms)} "
                f"max={format_ms(dist.max_ms)}"
            )

    def print_comparison(self, title: str, rows: list[ComparisonRow]) -> None:
        """Print an A/B table; lower is better."""
        table = Table(
            title=f"{title} (lower is better)",
            box=box.SIMPLE,
            header_style="bold cyan",
        )
        table.add_column("phase")
        table.add_column("A", justify="right")
        table.add_column("B", justify="right")
        table.add_column("notes", style="dim")

        for row in rows:
            a, b = _colored_pair(row)
            table.add_row(row.phase, a, b, row.notes)

        self.console.print(table)

    @staticmethod
    def _bench_label(bench: BenchmarkResult) -> str:
        if bench.discipline == SERIAL:
            return f"bench (serial x{bench.attempts})"
        return f"brute (concurrent x{bench.attempts})"

    def print_domain(self, domain: DomainReport) -> None:
        a = domain.a

        if not domain.is_comparison:
            if a.failure is not None:
                self.print_failure(a.failure)
            else:
                self.print_result(a.probe)
            for bench in (a.serial, a.concurrent):
                if bench is not None:
                    self.print_benchmark(self._bench_label(bench), bench)
            return

        b = domain.b
        self.console.print(f"\n[bold]=== {escape(domain.qname)} (compare) ===[/bold]")
        self.console.print(f"A:  {escape(a.server)}")
        self.console.print(f"B:  {escape(b.server)}")

        if a.failure is not None or b.failure is not None:
            if a.failure is not None:
                self.console.print(f"\n[red]A error:[/red]  {escape(a.failure.message)}")
            if b.failure is not None:
                self.console.print(f"[red]B error:[/red]  {escape(b.failure.message)}")
        else:
            self.print_comparison(
                "Timings compare",
                StatisticsEngine.compare_timings(a.probe.timings, b.probe.timings),
            )

        for bench_a, bench_b in ((a.serial, b.serial), (a.concurrent, b.concurrent)):
            if bench_a is not None and bench_b is not None:
                self.print_comparison(
                    f"{self._bench_label(bench_a)} compare",
                    StatisticsEngine.compare_benchmarks(bench_a, bench_b),
                )

    def print(self, report: LatencyReport) -> None:
        """Print a full latency report."""
        for domain in report.domains:
            self.print_domain(domain)
        self.console.print()
