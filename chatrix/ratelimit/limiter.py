"""
Tiered rate limiting for AI chat requests

Each tier is a `limits` fixed window keyed by caller identity. A window
starts at an identity's first request and lasts the tier's window. Tiers run
in order and every tier must allow the request; the first denial stops the
pipeline and later tiers are not charged.

Counters live in a `limits` storage chosen by URI: "memory://" for a single
process, "redis://host:6379" when several API instances share one budget.
"""

import time
from dataclasses import dataclass
from typing import List, Optional, Union

from limits import RateLimitItemPerSecond
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter
from loguru import logger

from chatrix.config.constants import (
    BURST_LIMIT_MESSAGE,
    DAILY_LIMIT_MESSAGE,
    MINUTE_LIMIT_MESSAGE,
    TIER_BURST,
    TIER_DAILY,
    TIER_MINUTE,
)
from chatrix.config.settings import settings, Settings


@dataclass
class TierDecision:
    """Outcome of charging one request against one tier"""
    tier: str
    allowed: bool
    limit: int
    remaining: int
    reset_after: float  # seconds until the window resets
    window: int
    message: str


@dataclass
class Allow:
    decisions: List[TierDecision]

    @property
    def allowed(self) -> bool:
        return True

    def most_constrained(self) -> TierDecision:
        return min(self.decisions, key=lambda d: (d.remaining, -d.reset_after))


@dataclass
class Deny:
    decision: TierDecision
    decisions: List[TierDecision]

    @property
    def allowed(self) -> bool:
        return False

    @property
    def tier(self) -> str:
        return self.decision.tier


Decision = Union[Allow, Deny]


class WindowTier:
    """One tier: `limit` requests per `window` seconds, plus its denial message."""

    def __init__(self, name: str, limit: int, window: int, message: str):
        if limit < 1:
            raise ValueError(f"Tier {name} needs a limit of at least 1, got {limit}")
        if window < 1 or int(window) != window:
            raise ValueError(f"Tier {name} needs a window of whole seconds, got {window}")
        self.name = name
        self.message = message
        self.item = RateLimitItemPerSecond(limit, int(window), namespace=f"chatrix-ai-{name}")

    @property
    def limit(self) -> int:
        return self.item.amount

    @property
    def window(self) -> int:
        return self.item.get_expiry()

    def __repr__(self) -> str:
        return f"WindowTier({self.name}: {self.limit} per {self.window}s)"


class TieredRateLimiter:
    """Ordered pipeline of window tiers sharing one identity key."""

    def __init__(self, tiers: List[WindowTier], storage_uri: str = "memory://"):
        self.tiers = tiers
        self.storage = storage_from_string(storage_uri)
        self.strategy = FixedWindowRateLimiter(self.storage)

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "TieredRateLimiter":
        config = config or settings
        return cls([
            WindowTier(TIER_BURST, config.ai_burst_limit, config.ai_burst_window, BURST_LIMIT_MESSAGE),
            WindowTier(TIER_MINUTE, config.ai_minute_limit, config.ai_minute_window, MINUTE_LIMIT_MESSAGE),
            WindowTier(TIER_DAILY, config.ai_daily_limit, config.ai_daily_window, DAILY_LIMIT_MESSAGE),
        ], storage_uri=config.rate_limit_storage_uri)

    def _hit(self, tier: WindowTier, key: str) -> TierDecision:
        # hit() increments and compares atomically in the storage; denied hits still count
        allowed = self.strategy.hit(tier.item, key)
        stats = self.strategy.get_window_stats(tier.item, key)
        return TierDecision(
            tier=tier.name,
            allowed=allowed,
            limit=tier.limit,
            remaining=stats.remaining,
            reset_after=max(0.0, stats.reset_time - time.time()),
            window=tier.window,
            message=tier.message,
        )

    def check(self, key: str) -> Decision:
        """
        Charge a request for `key` against every tier in order.

        Args:
            key: Identity key (see ratelimit.identity)

        Returns:
            Allow with every tier decision, or Deny for the first failing tier
        """
        decisions = []
        for tier in self.tiers:
            decision = self._hit(tier, key)
            decisions.append(decision)
            if not decision.allowed:
                logger.warning(
                    f"AI rate limit: tier={decision.tier} key={key} "
                    f"limit={decision.limit} reset_in={decision.reset_after:.1f}s"
                )
                return Deny(decision=decision, decisions=decisions)
        return Allow(decisions=decisions)

    def reset(self, key: Optional[str] = None) -> None:
        """Forget counters for `key`, or for everyone."""
        if key is None:
            self.storage.reset()
            return
        for tier in self.tiers:
            self.strategy.clear(tier.item, key)
