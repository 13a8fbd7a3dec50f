"""Storefront API - FastAPI application entry point.

Invariants:
    - Gatekeeper stages run in a fixed order, outermost first:
      security headers -> CORS -> rate limit -> body limit -> error formatting -> dispatch
    - Route-handler groups registered explicitly at /api/<group> (no auto-discovery)
    - Bootstrap completes inside the lifespan, before the server accepts traffic
    - Unmatched paths always get 404 {"message": "Route not found"}

Design Decisions:
    - create_app(settings) factory: tests build isolated apps with their own settings;
      the module-level `app` is what uvicorn serves
    - Bootstrap failure degrades (logged, readiness probe reports it) instead of crashing
"""

import logging
from collections.abc import Mapping
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware import Middleware

from app.api.body_limit import BodySizeLimitMiddleware
from app.api.error_handlers import ErrorFormattingMiddleware, register_error_handlers
from app.api.rate_limit import RateLimitMiddleware
from app.api.routes import health, include_route_groups
from app.api.security_headers import SecurityHeadersMiddleware
from app.api.static_assets import mount_static_assets
from app.config import Settings, get_settings
from app.infrastructure.bootstrap import ensure_initialized
from app.infrastructure.database import close_db, init_db
from app.infrastructure.observability import setup_logging
from app.infrastructure.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    logger.info(f"Environment: {settings.environment.value}")

    upload_dir = Path(settings.upload_dir)
    (upload_dir / "images").mkdir(parents=True, exist_ok=True)

    if settings.bootstrap_on_startup:
        app.state.bootstrap_outcome = await ensure_initialized(
            settings.resolved_database_url,
            settings.schema_script,
            settings.seed_script,
        )
    init_db(
        settings.resolved_database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(f"Storefront API ready on port {settings.port}")
    yield
    await close_db()
    logger.info("Storefront API shutting down")


def build_gatekeeper(settings: Settings, limiter: RateLimiter) -> list[Middleware]:
    """Gatekeeper stages, outermost first."""
    return [
        Middleware(SecurityHeadersMiddleware),
        Middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        ),
        Middleware(
            RateLimitMiddleware,
            limiter=limiter,
            trusted_hops=settings.trusted_proxy_hops,
        ),
        Middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes),
        Middleware(
            ErrorFormattingMiddleware,
            expose_detail=settings.expose_error_detail,
        ),
    ]


def create_app(
    settings: Settings | None = None,
    route_groups: Mapping[str, APIRouter] | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    limiter = RateLimiter.from_settings(settings)

    app = FastAPI(
        title="Storefront API",
        version="1.0.0",
        lifespan=lifespan,
        middleware=build_gatekeeper(settings, limiter),
    )
    app.state.settings = settings
    app.state.rate_limiter = limiter
    app.state.bootstrap_outcome = None

    register_error_handlers(app)

    # Routes - explicit registration
    app.include_router(health.router)
    include_route_groups(app, route_groups or {})

    mount_static_assets(app, Path(settings.upload_dir))
    return app


app = create_app()


def run() -> None:
    """Serve `app` with uvicorn using PORT/HOST from settings."""
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        # X-Forwarded-For is interpreted by the rate-limit stage
        proxy_headers=False,
        server_header=False,
    )


if __name__ == "__main__":
    run()
