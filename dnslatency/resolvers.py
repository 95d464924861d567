"""
Nameserver selection.

Provides the system default resolver from local configuration, named
profiles for popular public resolvers, and a heuristic for telling a
server argument apart from a query name.
"""

import ipaddress
import os
import platform
from dataclasses import dataclass
from typing import Optional

import dns.resolver

from .errors import ConfigurationError
from .query_engine import join_host_port, split_host_port


RESOLV_CONF = "/etc/resolv.conf"


@dataclass(frozen=True)
class ResolverProfile:
    """A well-known public resolver."""
    name: str
    ipv4: str
    ipv6: Optional[str] = None
    description: Optional[str] = None


# Pre-configured resolver profiles
RESOLVERS: dict[str, ResolverProfile] = {
    "cloudflare": ResolverProfile(
        name="Cloudflare",
        ipv4="1.1.1.1",
        ipv6="2606:4700:4700::1111",
        description="Cloudflare's privacy-focused DNS resolver",
    ),
    "google": ResolverProfile(
        name="Google",
        ipv4="8.8.8.8",
        ipv6="2001:4860:4860::8888",
        description="Google Public DNS",
    ),
    "quad9": ResolverProfile(
        name="Quad9",
        ipv4="9.9.9.9",
        ipv6="2620:fe::fe",
        description="Quad9 with malware blocking",
    ),
    "opendns": ResolverProfile(
        name="OpenDNS",
        ipv4="208.67.222.222",
        ipv6="2620:119:35::35",
        description="Cisco OpenDNS",
    ),
    "adguard": ResolverProfile(
        name="AdGuard",
        ipv4="94.140.14.14",
        ipv6="2a10:50c0::ad1:ff",
        description="AdGuard DNS with ad blocking",
    ),
}


def get_platform() -> str:
    """Get the current platform name."""
    system = platform.system().lower()
    if system == "darwin":
        return "macos"
    return system


def system_default_server(path: str = RESOLV_CONF) -> str:
    """
    Get the first configured system nameserver as ``host:port``.

    Raises:
        ConfigurationError: No resolv.conf on this platform or it lists
            no nameservers
    """
    if not os.path.exists(path):
        raise ConfigurationError(
            f"unsupported auto-detection on {get_platform()}; pass dns-server "
            "explicitly (e.g. 1.1.1.1 or 1.1.1.1:53)"
        )

    try:
        resolver = dns.resolver.Resolver(filename=path)
    except dns.resolver.NoResolverConfiguration as e:
        raise ConfigurationError(f"no nameserver entries in {path}") from e

    if not resolver.nameservers:
        raise ConfigurationError(f"no nameserver entries in {path}")

    return join_host_port(str(resolver.nameservers[0]), str(resolver.port))


def resolve_server(value: str) -> str:
    """Map a profile name to its address; return anything else unchanged."""
    profile = RESOLVERS.get(value.lower())
    if profile is not None:
        return profile.ipv4
    return value


def looks_like_server(value: str) -> bool:
    """True for ``host:port`` strings and IP literals."""
    if ":" in value and split_host_port(value) is not None:
        return True
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def list_resolvers() -> list[str]:
    """List all available resolver profile names."""
    return list(RESOLVERS.keys())
