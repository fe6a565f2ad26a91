# geofeed_verifier/processing/normalize.py
from __future__ import annotations

import ipaddress
from typing import Optional, Union

from geofeed_verifier.errors import InvalidNetworkError

Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

IPV4_HOST_PREFIX = 32
# A bare IPv6 address names a single host, not its /64.
IPV6_HOST_PREFIX = 128

REGION_SEPARATOR = "-"


def normalize_network(value: str, line_number: Optional[int] = None) -> Network:
    """
    Turn a geofeed network field into a network object.

    CIDR blocks are used as given (host bits are masked off);
    bare addresses become single-host networks.
    """
    raw = value.strip()
    if not raw:
        raise InvalidNetworkError(value, line_number)

    if "/" not in raw:
        prefix_len = IPV6_HOST_PREFIX if ":" in raw else IPV4_HOST_PREFIX
        raw = f"{raw}/{prefix_len}"

    try:
        return ipaddress.ip_network(raw, strict=False)
    except ValueError as e:
        raise InvalidNetworkError(value, line_number) from e


def is_qualified_region(region_code: str) -> bool:
    return REGION_SEPARATOR in region_code


def qualify_region(country_code: str, region_code: str) -> str:
    """
    Return the country-prefixed form of region_code ("NY" -> "US-NY").

    Already qualified codes and empty codes are returned unchanged.
    """
    region_code = region_code.strip()
    if not region_code or is_qualified_region(region_code):
        return region_code
    return f"{country_code.strip()}{REGION_SEPARATOR}{region_code}"


def authoritative_region(
        country_code: str,
        subdivision_code: str,
        suggested_region: str,
        lax_mode: bool,
) -> str:
    """
    Build the database's region code in the shape the correction uses.

    The database always holds a bare subdivision code. In strict mode it
    is always compared country-qualified, so a bare correction code can
    never match. In lax mode it is qualified only when the correction is.
    """
    if not subdivision_code:
        return ""
    if not lax_mode or is_qualified_region(suggested_region):
        return qualify_region(country_code, subdivision_code)
    return subdivision_code


def same_code(a: Optional[str], b: Optional[str]) -> bool:
    """Case-insensitive equality, treating None as "". Whitespace is significant."""
    return (a or "").casefold() == (b or "").casefold()
