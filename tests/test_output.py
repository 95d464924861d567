import json
from datetime import datetime
from io import StringIO

import pytest
from rich.console import Console

from dnslatency.errors import NetworkError
from dnslatency.models import (
    Answer,
    BenchmarkResult,
    DomainReport,
    HeaderFlags,
    LatencyReport,
    PhaseTimings,
    ProbeFailure,
    ProbeResult,
    ServerRun,
)
from dnslatency.output import JSONOutput, RichConsoleOutput, format_ms


TIMINGS = PhaseTimings(
    total_ms=12.5, dial_ms=0.2, pack_ms=0.01, write_ms=0.05, read_ms=11.0, unpack_ms=0.03
)


def probe_result(server="192.0.2.1:53", timings=TIMINGS):
    return ProbeResult(
        server=server,
        qname="example.com",
        timeout=3.0,
        timings=timings,
        local_addr="192.0.2.100:40000",
        remote_addr=server,
        rcode="NOERROR",
        msg_id=4242,
        flags=HeaderFlags(qr=True, rd=True, ra=True),
        answer_count=1,
        query_size=29,
        response_size=45,
        answers=[Answer("93.184.216.34", 300)],
    )


def make_report(domains, compare=None):
    now = datetime.now()
    return LatencyReport(
        started_at=now,
        completed_at=now,
        server="192.0.2.1:53",
        timeout=3.0,
        bench_count=10,
        brute=0,
        compare=compare,
        domains=domains,
    )


def render(report):
    buffer = StringIO()
    console = Console(file=buffer, width=140, color_system=None)
    RichConsoleOutput(console).print(report)
    return buffer.getvalue()


@pytest.mark.parametrize("value,expected", [
    (0, "0s"),
    (0.5, "500.000µs"),
    (12.5, "12.500ms"),
    (2500, "2.500s"),
])
def test_format_ms(value, expected):
    assert format_ms(value) == expected


def test_console_result_block():
    bench = BenchmarkResult(
        attempts=10, success=9, failure=1, avg=TIMINGS, samples=[TIMINGS] * 9
    )
    run = ServerRun(server="192.0.2.1:53", probe=probe_result(), serial=bench)

    text = render(make_report([DomainReport(qname="example.com", a=run)]))

    assert "=== example.com ===" in text
    assert "NOERROR" in text
    assert "4242" in text
    assert "QR=True" in text
    assert "93.184.216.34" in text
    assert "rtt(approx)" in text
    assert "bench (serial x10)" in text
    assert "avg_total" in text


def test_console_failure_with_brackets_in_message():
    failure = ProbeFailure(
        server="[::1]:53",
        qname="example.com",
        error=NetworkError("udp [::1]:53: [Errno 111] Connection refused"),
    )
    run = ServerRun(server="[::1]:53", failure=failure)

    text = render(make_report([DomainReport(qname="example.com", a=run)]))

    assert "[Errno 111] Connection refused" in text
    assert "[::1]:53" in text


def test_console_comparison():
    slower = PhaseTimings(total_ms=20, read_ms=18)
    a = ServerRun(server="192.0.2.1:53", probe=probe_result())
    b = ServerRun(server="192.0.2.2:53", probe=probe_result("192.0.2.2:53", slower))

    text = render(make_report([DomainReport(qname="example.com", a=a, b=b)], compare="192.0.2.2:53"))

    assert "(compare)" in text
    assert "lower is better" in text
    assert "12.500ms" in text
    assert "20.000ms" in text


def test_json_output():
    bench = BenchmarkResult(
        attempts=3, success=2, failure=1, avg=TIMINGS,
        discipline="concurrent", samples=[TIMINGS, TIMINGS],
    )
    a = ServerRun(server="192.0.2.1:53", probe=probe_result(), concurrent=bench)
    b = ServerRun(
        server="192.0.2.2:53",
        failure=ProbeFailure("192.0.2.2:53", "example.com", NetworkError("timeout")),
    )

    data = json.loads(JSONOutput.format(
        make_report([DomainReport(qname="example.com", a=a, b=b)], compare="192.0.2.2:53")
    ))

    entry = data["domains"][0]
    assert data["metadata"]["compare"] == "192.0.2.2:53"
    assert entry["a"]["result"]["rcode"] == "NOERROR"
    assert entry["a"]["result"]["answers"] == [{"value": "93.184.216.34", "ttl": 300}]
    assert entry["a"]["result"]["timings_ms"]["rtt_approx"] == pytest.approx(11.05)
    assert entry["a"]["brute"]["fail"] == 1
    assert entry["a"]["brute"]["total_ms"]["max"] == 12.5
    assert entry["b"]["error"] == "timeout"
