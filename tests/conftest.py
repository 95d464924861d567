import socketserver
import threading
from typing import Optional

import dns.flags
import dns.message
import dns.rcode
import dns.rrset
import pytest

from dnslatency.models import PhaseTimings, ProbeResult


ANSWER_ADDRESSES = ("192.0.2.1", "192.0.2.2")


class FakeDNSHandler(socketserver.BaseRequestHandler):
    """Answers A queries; behavior per name is set on the server."""

    def handle(self):
        data, sock = self.request
        query = dns.message.from_wire(data)
        question = query.question[0]
        qname = question.name.to_text(omit_final_dot=True)

        self.server.seen.append(qname)
        behavior = self.server.behaviors.get(qname, "answer")

        if behavior == "drop":
            return
        if behavior == "garbage":
            sock.sendto(b"\x00\x01garbage", self.client_address)
            return

        response = dns.message.make_response(query)
        response.flags |= dns.flags.RA
        if behavior == "nxdomain":
            response.set_rcode(dns.rcode.NXDOMAIN)
        else:
            if behavior == "cname":
                response.answer.append(
                    dns.rrset.from_text(question.name, 60, "IN", "CNAME", "target.example.")
                )
            response.answer.append(
                dns.rrset.from_text(question.name, 300, "IN", "A", *ANSWER_ADDRESSES)
            )
        sock.sendto(response.to_wire(), self.client_address)


class FakeDNSServer(socketserver.ThreadingUDPServer):
    daemon_threads = True

    def __init__(self):
        super().__init__(("127.0.0.1", 0), FakeDNSHandler)
        self.behaviors: dict[str, str] = {}
        self.seen: list[str] = []

    @property
    def address(self) -> str:
        host, port = self.server_address
        return f"{host}:{port}"


@pytest.fixture
def dns_server():
    server = FakeDNSServer()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


def make_result(
    timings: PhaseTimings,
    server: str = "192.0.2.53:53",
    qname: str = "example.com",
) -> ProbeResult:
    return ProbeResult(server=server, qname=qname, timeout=1.0, timings=timings)


class ScriptedEngine:
    """Returns (or raises) scripted outcomes in call order."""

    def __init__(self, outcomes: list):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def probe(self, server: str, qname: str, timeout: float) -> ProbeResult:
        outcome = self.outcomes[self.calls]
        self.calls += 1
        if isinstance(outcome, Exception):
            raise outcome
        return make_result(outcome, server=server, qname=qname)


class NameFailingEngine:
    """Fails every probe for one name, succeeds for the others."""

    def __init__(self, failing_name: str, error: Exception, timings: Optional[PhaseTimings] = None):
        self.failing_name = failing_name
        self.error = error
        self.timings = timings or PhaseTimings(total_ms=5.0, read_ms=3.0, write_ms=1.0)
        self.calls = 0

    async def probe(self, server: str, qname: str, timeout: float) -> ProbeResult:
        self.calls += 1
        if qname == self.failing_name:
            raise self.error
        return make_result(self.timings, server=server, qname=qname)
