"""
Error types for DNS latency probing.

Configuration problems are fatal to the requested operation. Probe
errors describe why a single exchange failed; the benchmark disciplines
count network and protocol failures instead of aborting.
"""

from typing import Optional


class LatencyError(Exception):
    """Base class for all dns-latency errors."""


class ConfigurationError(LatencyError, ValueError):
    """Invalid input or missing local configuration."""


class ProbeError(LatencyError):
    """A single probe failed."""

    def __init__(
        self,
        message: str,
        server: Optional[str] = None,
        qname: Optional[str] = None,
    ):
        super().__init__(message)
        self.server = server
        self.qname = qname


class SerializationError(ProbeError):
    """The query could not be packed into wire format."""


class NetworkError(ProbeError):
    """Dial, write or read failed (timeouts included)."""


class ProtocolError(ProbeError):
    """The response could not be decoded."""
