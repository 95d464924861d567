"""
Core DNS probe engine.

Executes a single A query over UDP against one server and measures the
wall-clock duration of every phase of the exchange separately:
pack, dial, write, read and unpack, plus the overall total.
"""

import asyncio
import logging
import socket
import time
from typing import Optional

from .codec import DnsPythonCodec, WireCodec
from .errors import ConfigurationError, NetworkError, ProbeError
from .models import NETWORK_UDP, PhaseTimings, ProbeResult


logger = logging.getLogger(__name__)

DEFAULT_PORT = "53"

# Large enough for any UDP DNS response, EDNS or not.
READ_BUFFER_SIZE = 65535


def split_host_port(value: str) -> Optional[tuple[str, str]]:
    """Split ``host:port`` or ``[v6]:port``; None if there is no port."""
    if value.startswith("["):
        end = value.find("]")
        if end < 0 or value[end + 1:end + 2] != ":":
            return None
        return value[1:end], value[end + 2:]

    host, sep, port = value.rpartition(":")
    if not sep or ":" in host:
        return None
    return host, port


def join_host_port(host: str, port: str) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def normalize_server(server: str) -> str:
    """
    Append the default DNS port when ``server`` has none.

    ``"1.1.1.1"`` becomes ``"1.1.1.1:53"``; ``"1.1.1.1:5353"`` and
    ``"example.org:53"`` are returned unchanged. A bare IPv6 address is
    bracketed.
    """
    if ":" in server and split_host_port(server) is not None:
        return server
    return join_host_port(server, DEFAULT_PORT)


def _elapsed_ms(start_ns: int) -> float:
    return (time.perf_counter_ns() - start_ns) / 1_000_000


def _format_address(address) -> str:
    host, port = address[0], address[1]
    return join_host_port(host, str(port))


class ProbeEngine:
    """
    Timed DNS prober.

    Every call opens exactly one UDP socket, performs one write and one
    read, and closes the socket again. Nothing is retried: any I/O error
    is raised as a ``NetworkError`` and decode failures as a
    ``ProtocolError``.
    """

    def __init__(self, codec: Optional[WireCodec] = None):
        """
        Initialize the engine.

        Args:
            codec: Wire codec used to pack queries and unpack responses
        """
        self.codec = codec or DnsPythonCodec()

    async def _connect(
        self,
        loop: asyncio.AbstractEventLoop,
        host: str,
        port: int,
    ) -> socket.socket:
        infos = await loop.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
        family, sock_type, proto, _, address = infos[0]

        sock = socket.socket(family, sock_type, proto)
        sock.setblocking(False)
        try:
            await loop.sock_connect(sock, address)
        except BaseException:
            sock.close()
            raise
        return sock

    async def _dial(
        self,
        loop: asyncio.AbstractEventLoop,
        server: str,
        timeout: float,
    ) -> socket.socket:
        """Open a connected UDP socket to ``server`` within ``timeout``."""
        host, port = split_host_port(server)
        try:
            return await asyncio.wait_for(
                self._connect(loop, host, int(port)),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise NetworkError(f"dial udp {server}: i/o timeout") from e
        except (OSError, ValueError) as e:
            raise NetworkError(f"dial udp {server}: {e}") from e

    @staticmethod
    async def _before_deadline(
        loop: asyncio.AbstractEventLoop,
        awaitable,
        deadline: float,
        operation: str,
    ):
        remaining = deadline - loop.time()
        if remaining <= 0:
            awaitable.close()
            raise asyncio.TimeoutError(operation)
        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError as e:
            raise asyncio.TimeoutError(operation) from e

    async def probe(
        self,
        server: str,
        qname: str,
        timeout: float,
    ) -> ProbeResult:
        """
        Execute a single timed A query.

        Args:
            server: ``host`` or ``host:port`` of the nameserver
            qname: Name to look up; it is fully qualified before querying
            timeout: Seconds allowed for the whole exchange

        Returns:
            ProbeResult with decoded response fields and phase timings

        Raises:
            SerializationError: The query could not be packed
            NetworkError: Dial, write or read failed or timed out
            ProtocolError: The response could not be decoded
        """
        if timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {timeout}")

        server = normalize_server(server)
        loop = asyncio.get_running_loop()

        start_total = time.perf_counter_ns()

        try:
            start = time.perf_counter_ns()
            wire = self.codec.pack_query(qname)
            pack_ms = _elapsed_ms(start)

            start = time.perf_counter_ns()
            sock = await self._dial(loop, server, timeout)
            dial_ms = _elapsed_ms(start)
        except ProbeError as e:
            e.server, e.qname = server, qname
            raise

        try:
            deadline = loop.time() + timeout

            local = _format_address(sock.getsockname())
            remote = _format_address(sock.getpeername())

            start = time.perf_counter_ns()
            await self._before_deadline(
                loop, loop.sock_sendall(sock, wire), deadline, "write"
            )
            write_ms = _elapsed_ms(start)
            written = len(wire)

            start = time.perf_counter_ns()
            data = await self._before_deadline(
                loop, loop.sock_recv(sock, READ_BUFFER_SIZE), deadline, "read"
            )
            read_ms = _elapsed_ms(start)

            start = time.perf_counter_ns()
            decoded = self.codec.unpack_response(data)
            unpack_ms = _elapsed_ms(start)

            total_ms = _elapsed_ms(start_total)
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"{e} udp {remote}: i/o timeout", server=server, qname=qname
            ) from e
        except OSError as e:
            raise NetworkError(
                f"udp {server}: {e}", server=server, qname=qname
            ) from e
        except ProbeError as e:
            e.server, e.qname = server, qname
            raise
        finally:
            sock.close()

        logger.debug(
            "probe %s @ %s: %s in %.3fms (%d answers)",
            qname, server, decoded.rcode, total_ms, decoded.answer_count,
        )

        return ProbeResult(
            server=server,
            qname=qname,
            timeout=timeout,
            network=NETWORK_UDP,
            local_addr=local,
            remote_addr=remote,
            rcode=decoded.rcode,
            msg_id=decoded.msg_id,
            flags=decoded.flags,
            answer_count=decoded.answer_count,
            authority_count=decoded.authority_count,
            additional_count=decoded.additional_count,
            query_size=written,
            response_size=len(data),
            answers=decoded.answers,
            timings=PhaseTimings(
                total_ms=total_ms,
                dial_ms=dial_ms,
                pack_ms=pack_ms,
                write_ms=write_ms,
                read_ms=read_ms,
                unpack_ms=unpack_ms,
            ),
        )
