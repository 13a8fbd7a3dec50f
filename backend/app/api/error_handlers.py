"""Error Handlers - uniform JSON error envelopes for every failure that reaches the app.

Invariants:
    - StorefrontError -> its own status and {message, error} envelope
    - RequestValidationError -> 400 with field-level details
    - HTTPException -> {message: detail}; the router's bare 404 becomes "Route not found"
    - Any other exception -> 500 {message, error}; detail only when exposed
    - ErrorFormattingMiddleware never raises

Design Decisions:
    - Catch-all lives in middleware rather than an Exception handler so the 500
      response still passes back through the security-header and CORS stages
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.errors import ErrorCategory, StorefrontError

logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND = "Route not found"
GENERIC_ERROR_MESSAGE = "Something went wrong!"


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_storefront_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)


def _register_storefront_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        logger.error(
            f"StorefrontError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": _http_error_message(exc)},
            headers=getattr(exc, "headers", None),
        )


def _http_error_message(exc: StarletteHTTPException) -> str:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return ROUTE_NOT_FOUND
    return exc.detail if isinstance(exc.detail, str) else str(exc.detail)


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "message": "Invalid request data",
        "error": {
            "code": "VALIDATION_ERROR",
            "category": ErrorCategory.VALIDATION.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }


def build_internal_error_response(exc: BaseException, expose_detail: bool) -> dict:
    """500 body: error detail in development, an empty object otherwise."""
    return {
        "message": GENERIC_ERROR_MESSAGE,
        "error": str(exc) if expose_detail else {},
    }


class ErrorFormattingMiddleware:
    """Catch-all around dispatch for errors no handler claimed."""

    def __init__(self, app: ASGIApp, expose_detail: bool = False):
        self.app = app
        self.expose_detail = expose_detail

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, tracking_send)
        except Exception as exc:
            logger.error(
                f"Unhandled exception on {scope['path']}: {exc}",
                exc_info=True,
                extra={"path": scope["path"], "method": scope.get("method")},
            )
            if response_started:
                # Headers are already on the wire; nothing left to format.
                return
            try:
                response = JSONResponse(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    content=build_internal_error_response(exc, self.expose_detail),
                )
                await response(scope, receive, send)
            except Exception:
                logger.exception("Failed to send error response")
