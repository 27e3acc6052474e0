"""
Rate-limit identity derivation

Authenticated callers are limited by user id. Anyone else falls back to a
normalized network address so that rotating within one IPv6 allocation
(or using zone ids / IPv4-mapped forms) does not escape the limiter.
"""

import ipaddress
from typing import Optional

from chatrix.config.settings import settings


def normalize_address(address: Optional[str], ipv6_subnet: Optional[int] = None) -> str:
    """
    Normalize a client address for use as a limiter key.

    - Strips IPv6 zone ids ("fe80::1%eth0") and surrounding brackets
    - Unwraps IPv4-mapped IPv6 ("::ffff:10.0.0.1" -> "10.0.0.1")
    - Collapses IPv6 addresses to their /`ipv6_subnet` network

    Unparseable input is returned lowercased and stripped.
    """
    if not address:
        return "unknown"
    subnet = settings.ipv6_subnet if ipv6_subnet is None else ipv6_subnet

    raw = address.strip().strip("[]").split("%", 1)[0]
    try:
        ip = ipaddress.ip_address(raw)
    except ValueError:
        return address.strip().lower()

    if isinstance(ip, ipaddress.IPv6Address):
        if ip.ipv4_mapped is not None:
            return str(ip.ipv4_mapped)
        return str(ipaddress.IPv6Network(f"{ip}/{subnet}", strict=False))
    return str(ip)


def client_address(
    peer_host: Optional[str],
    forwarded_for: Optional[str] = None,
    trust_proxy: Optional[bool] = None,
) -> Optional[str]:
    """Pick the caller's address, honoring X-Forwarded-For only behind a trusted proxy."""
    trust = settings.trust_proxy if trust_proxy is None else trust_proxy
    if trust and forwarded_for:
        first_hop = forwarded_for.split(",", 1)[0].strip()
        if first_hop:
            return first_hop
    return peer_host


def rate_limit_key(
    user_id: Optional[str],
    peer_host: Optional[str] = None,
    forwarded_for: Optional[str] = None,
    trust_proxy: Optional[bool] = None,
) -> str:
    """Limiter key: "user:<id>" when authenticated, otherwise "ip:<normalized address>"."""
    if user_id:
        return f"user:{user_id}"
    address = client_address(peer_host, forwarded_for, trust_proxy)
    return f"ip:{normalize_address(address)}"
