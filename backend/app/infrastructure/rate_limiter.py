"""Rate Limiter - tiered fixed-window request budgets keyed by client identity.

Invariants:
    - Windows are independent per (tier, client identity)
    - Accepted requests in one window never exceed the tier's cap
    - A window resets as a whole once its duration elapses
    - Middleware only talks to check_and_increment() / reset(); counter state
      lives in the `limits` storage, never in a module-level dict

Design Decisions:
    - `limits` fixed-window strategy (the counter layer slowapi is built on)
    - Storage chosen by URI: async+memory:// for one process,
      async+redis://... when several instances must share counters
"""

import logging
import time
from dataclasses import dataclass

from limits import RateLimitItem, RateLimitItemPerSecond
from limits.aio.strategies import FixedWindowRateLimiter
from limits.storage import storage_from_string

from app.config import Settings
from app.core.domain_types import ClientId, RateLimitDecision, RateLimitTier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TierPolicy:
    """Cap and window for one tier."""
    limit: int
    window_seconds: int

    def as_item(self) -> RateLimitItem:
        return RateLimitItemPerSecond(self.limit, self.window_seconds)


class RateLimiter:
    """Counts requests per (tier, client) inside fixed windows."""

    def __init__(
        self,
        policies: dict[RateLimitTier, TierPolicy],
        storage_uri: str = "async+memory://",
    ):
        self._policies = dict(policies)
        self._items = {tier: p.as_item() for tier, p in self._policies.items()}
        self._storage = storage_from_string(storage_uri)
        self._strategy = FixedWindowRateLimiter(self._storage)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimiter":
        window = settings.rate_limit_window_seconds
        return cls(
            {
                RateLimitTier.API: TierPolicy(settings.api_rate_limit, window),
                RateLimitTier.IMAGE: TierPolicy(settings.image_rate_limit, window),
            },
            storage_uri=settings.rate_limit_storage_uri,
        )

    def policy(self, tier: RateLimitTier) -> TierPolicy:
        return self._policies[tier]

    async def check_and_increment(
        self, key: ClientId, tier: RateLimitTier,
    ) -> RateLimitDecision:
        """Count one request against the client's window for *tier*."""
        item = self._items[tier]
        allowed = await self._strategy.hit(item, tier.value, key)
        stats = await self._strategy.get_window_stats(item, tier.value, key)
        reset_at = stats.reset_time if stats.reset_time else time.time() + item.get_expiry()
        return RateLimitDecision(
            allowed=allowed,
            limit=item.amount,
            remaining=max(0, stats.remaining),
            reset_at=reset_at,
        )

    async def reset(self) -> None:
        """Drop every window (all tiers, all clients)."""
        await self._storage.reset()
        logger.info("Rate-limit windows reset")
