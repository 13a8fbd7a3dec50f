"""Domain Types - enums and value types shared by the gatekeeper and bootstrapper.

Invariants:
    - Every rate-limit tier is declared here with its path prefixes
    - All valid states encoded as Enums - no raw string matching
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType

ClientId = NewType("ClientId", str)


class RateLimitTier(str, Enum):
    """Independent request budgets, keyed separately per client identity."""
    API = "api"
    IMAGE = "image"


# Longest prefix wins; paths outside every prefix are not rate limited.
TIER_PREFIXES: dict[str, RateLimitTier] = {
    "/api": RateLimitTier.API,
    "/uploads": RateLimitTier.IMAGE,
    "/images": RateLimitTier.IMAGE,
}

TIER_MESSAGES: dict[RateLimitTier, str] = {
    RateLimitTier.API: "Too many API requests from this IP, please try again later.",
    RateLimitTier.IMAGE: "Too many image requests from this IP, please try again later.",
}


class BootstrapOutcome(str, Enum):
    """Result of one ensure_initialized() run."""
    INITIALIZED = "initialized"
    ALREADY_INITIALIZED = "already_initialized"
    FAILED = "failed"


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single check_and_increment() call."""
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds

    def retry_after(self, now: float) -> int:
        return max(0, int(self.reset_at - now + 0.999))


def _matches_prefix(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def tier_for_path(path: str) -> RateLimitTier | None:
    """Return the rate-limit tier guarding *path*, or None."""
    for prefix in sorted(TIER_PREFIXES, key=len, reverse=True):
        if _matches_prefix(path, prefix):
            return TIER_PREFIXES[prefix]
    return None
