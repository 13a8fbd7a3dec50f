"""Body Size Limit - reject oversized JSON / urlencoded bodies before any handler runs.

Invariants:
    - Only JSON and application/x-www-form-urlencoded bodies are limited
    - Declared Content-Length over the limit is rejected without reading the body
    - Chunked bodies are counted as they stream; crossing the limit aborts the read
    - Rejection is 413 {"message": "Request entity too large"}
"""

import logging

from fastapi import HTTPException, status
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.errors import PayloadTooLargeError

logger = logging.getLogger(__name__)

LIMITED_CONTENT_TYPES = ("application/json", "application/x-www-form-urlencoded")


def is_limited_content_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type in LIMITED_CONTENT_TYPES or media_type.endswith("+json")


class BodySizeLimitMiddleware:

    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    def _reject(self, scope: Scope) -> JSONResponse:
        exc = PayloadTooLargeError(self.max_body_bytes)
        logger.warning(
            "Request body too large",
            extra={
                "path": scope["path"], "limit_bytes": self.max_body_bytes,
                "error_code": exc.code,
            },
        )
        return JSONResponse({"message": exc.message}, status_code=exc.http_status)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        if not is_limited_content_type(headers.get("content-type")):
            await self.app(scope, receive, send)
            return

        declared = headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_body_bytes:
            await self._reject(scope)(scope, receive, send)
            return

        received = 0
        response_started = False

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    raise HTTPException(
                        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail="Request entity too large",
                    )
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, counting_receive, tracking_send)
        except HTTPException as exc:
            if exc.status_code != status.HTTP_413_REQUEST_ENTITY_TOO_LARGE or response_started:
                raise
            await self._reject(scope)(scope, receive, send)
