"""
Rate limiting layer - Tiered window limiter and identity keys
"""

from chatrix.ratelimit.identity import client_address, normalize_address, rate_limit_key
from chatrix.ratelimit.limiter import (
    Allow,
    Deny,
    TierDecision,
    TieredRateLimiter,
    WindowTier,
)

__all__ = [
    "Allow",
    "Deny",
    "TierDecision",
    "TieredRateLimiter",
    "WindowTier",
    "client_address",
    "normalize_address",
    "rate_limit_key",
]
