"""
Command-line interface for dns-latency.

Measures per-phase DNS request timings against one nameserver, or
compares two, with optional serial (caching) and concurrent (burst)
benchmarks.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .errors import ConfigurationError
from .output import JSONOutput, RichConsoleOutput
from .resolvers import (
    RESOLVERS,
    get_platform,
    list_resolvers,
    looks_like_server,
    resolve_server,
    system_default_server,
)
from .runner import LatencyRunner
from .settings import DEFAULT_BENCH_COUNT, DEFAULT_TIMEOUT, LatencySettings
from .workload import parse_domains


logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    """Send library logs to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def pick_server(server: Optional[str]) -> str:
    """Use the given server (or profile name), else the system default."""
    if server:
        resolved = resolve_server(server)
        if resolved == server and not looks_like_server(server):
            logger.warning(
                "%s is not an IP address or host:port; querying it as a "
                "nameserver hostname on port 53",
                server,
            )
        return resolved

    try:
        return system_default_server()
    except ConfigurationError as e:
        raise ConfigurationError(
            f"no dns-server arg and failed to detect system default resolver: {e}"
        ) from e


@click.group()
@click.version_option(__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """
    dns-latency - per-phase DNS timing and caching checks.

    Breaks a single UDP query into pack, dial, write, read and unpack
    phases, and benchmarks repeated queries serially or concurrently.
    """
    configure_logging(verbose)


@main.command()
@click.argument("server", required=False)
@click.option(
    "--domains", "-d",
    default="",
    help="CSV of domains to test (overrides the default set). "
         "Example: --domains google.com,example.org",
)
@click.option(
    "--compare", "-c",
    default=None,
    help="Compare against another DNS server (host, host:port or profile name). "
         "Example: --compare 9.9.9.9",
)
@click.option(
    "--bench", "-b",
    is_flag=True,
    help="Repeat serially after the first request and print averages (caching check).",
)
@click.option(
    "--bench-count",
    type=int,
    default=DEFAULT_BENCH_COUNT,
    show_default=True,
    help="Serial repetitions for --bench",
)
@click.option(
    "--brute",
    type=int,
    default=0,
    help="Run N requests concurrently per domain and print averages "
         "(default disabled; typical N=250).",
)
@click.option(
    "--timeout", "-t",
    type=float,
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Per-request timeout in seconds",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    help="Also save the report as JSON to this path",
)
@click.option(
    "--json",
    is_flag=True,
    help="Output results as JSON to stdout",
)
def latency(
    server: Optional[str],
    domains: str,
    compare: Optional[str],
    bench: bool,
    bench_count: int,
    brute: int,
    timeout: float,
    output: Optional[str],
    json: bool,
):
    """
    Measure detailed DNS request timings against SERVER.

    SERVER is host or host:port (port 53 if omitted) or a profile name;
    the system default resolver is used when it is left out.

    Examples:

    \b
      # Timings for the default domain set via the system resolver
      dns-latency latency

    \b
      # Caching check: 10 serial repeats per domain
      dns-latency latency 1.1.1.1 --bench

    \b
      # Burst of 250 concurrent queries, compared with Quad9
      dns-latency latency cloudflare --brute 250 --compare quad9
    """
    try:
        settings = LatencySettings(
            timeout=timeout,
            bench=bench,
            bench_count=bench_count,
            brute=brute,
            domains=parse_domains(domains),
            compare=resolve_server(compare) if compare is not None else None,
        )
        runner = LatencyRunner(pick_server(server), settings)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    report = asyncio.run(runner.run())

    if json:
        click.echo(JSONOutput.format(report))
    else:
        RichConsoleOutput().print(report)

    if output:
        path = Path(output)
        JSONOutput.save(report, path)
        if not json:
            click.echo(f"Results saved to {path}")


@main.command()
def list_available():
    """List the built-in resolver profiles."""
    from rich.table import Table
    from rich import box

    console = Console()
    table = Table(
        title="Available DNS Resolvers",
        box=box.ROUNDED,
        header_style="bold cyan",
    )

    table.add_column("Name", style="green")
    table.add_column("IPv4", style="cyan")
    table.add_column("IPv6", style="yellow")
    table.add_column("Description")

    for name in sorted(list_resolvers()):
        profile = RESOLVERS[name]
        table.add_row(
            name,
            profile.ipv4,
            profile.ipv6 or "",
            profile.description or "",
        )

    console.print(table)


@main.command()
def info():
    """Show the system default DNS server."""
    click.echo(f"Platform: {get_platform()}")

    try:
        server = system_default_server()
    except ConfigurationError as e:
        click.echo(f"Could not detect system DNS server: {e}", err=True)
        sys.exit(1)

    click.echo(f"Default DNS server: {server}")


if __name__ == "__main__":
    main()
