"""Rate Limit Stage - reject requests over their tier's budget before dispatch.

Invariants:
    - Tier chosen by path prefix (core/domain_types.py); other paths pass through
    - Client identity honours exactly `trusted_hops` proxy entries
    - Rejection is 429 text/plain with the tier's fixed message and Retry-After
    - Accepted responses carry X-RateLimit-Limit / X-RateLimit-Remaining
"""

import logging
import time

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.client_identity import resolve_client_id
from app.core.domain_types import TIER_MESSAGES, tier_for_path
from app.core.errors import ErrorContext, RateLimitExceededError
from app.infrastructure.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class RateLimitMiddleware:

    def __init__(self, app: ASGIApp, limiter: RateLimiter, trusted_hops: int = 1):
        self.app = app
        self.limiter = limiter
        self.trusted_hops = trusted_hops

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        tier = tier_for_path(scope["path"])
        if tier is None:
            await self.app(scope, receive, send)
            return

        client = scope.get("client")
        client_id = resolve_client_id(
            client[0] if client else None,
            Headers(scope=scope).get("x-forwarded-for"),
            self.trusted_hops,
        )
        decision = await self.limiter.check_and_increment(client_id, tier)
        rate_headers = {
            "X-RateLimit-Limit": str(decision.limit),
            "X-RateLimit-Remaining": str(decision.remaining),
        }

        if not decision.allowed:
            exc = RateLimitExceededError(
                TIER_MESSAGES[tier],
                retry_after_seconds=decision.retry_after(time.time()),
                context=ErrorContext(client_id=client_id, path=scope["path"]),
            )
            logger.warning(
                "Rate limit exceeded",
                extra={
                    "client_id": client_id, "path": scope["path"],
                    "tier": tier.value, "error_code": exc.code,
                },
            )
            response = PlainTextResponse(
                exc.message,
                status_code=exc.http_status,
                headers={
                    **rate_headers,
                    "Retry-After": str(exc.context.retry_after_seconds),
                },
            )
            await response(scope, receive, send)
            return

        async def send_with_rate_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in rate_headers.items():
                    headers.setdefault(name, value)
            await send(message)

        await self.app(scope, receive, send_with_rate_headers)
