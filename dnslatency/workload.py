"""
Query names for latency runs.

Provides the default domain set, parsing of user supplied domain lists,
and random names that no resolver is likely to have cached, used as a
cold-cache control probe.
"""

import secrets
import string

from .errors import ConfigurationError


MAX_LABEL_LENGTH = 63

# Labels may not start or end with a hyphen.
EDGE_CHARS = string.ascii_lowercase + string.digits
INTERIOR_CHARS = EDGE_CHARS + "-"

# Well-known names queried when no domain list is given
DEFAULT_DOMAINS = [
    "google.com",
    "earentir.dev",
]


def random_label(length: int) -> str:
    """
    Generate a random DNS label of ``length`` characters.

    Raises:
        ConfigurationError: length is outside 1..63
    """
    if length < 1 or length > MAX_LABEL_LENGTH:
        raise ConfigurationError(
            f"label length must be 1..{MAX_LABEL_LENGTH}, got {length}"
        )

    chars = [secrets.choice(EDGE_CHARS)]
    chars.extend(secrets.choice(INTERIOR_CHARS) for _ in range(length - 2))
    if length > 1:
        chars.append(secrets.choice(EDGE_CHARS))
    return "".join(chars)


def random_domain() -> str:
    """A 128 character name under .com: ``<60>.<63>.com``."""
    return f"{random_label(60)}.{random_label(63)}.com"


def default_domains() -> list[str]:
    """Default names plus a fresh cold-cache name."""
    return DEFAULT_DOMAINS + [random_domain()]


def parse_domains(value: str) -> list[str]:
    """
    Split a comma separated domain list.

    Blank entries are dropped. An empty result from non-blank input is an
    error; blank input gives an empty list.
    """
    if not value.strip():
        return []

    domains = [d.strip() for d in value.split(",") if d.strip()]
    if not domains:
        raise ConfigurationError(
            "--domains provided but no valid domains found after parsing"
        )
    return domains
