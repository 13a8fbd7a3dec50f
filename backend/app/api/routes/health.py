"""Health & Readiness Probes - liveness and readiness endpoints.

Invariants:
    - GET /api/health always returns 200 with status "OK" and an ISO-8601 timestamp
    - GET /api/health/ready returns 503 if the bootstrap failed or the database is unreachable
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from app.core.domain_types import BootstrapOutcome
from app.core.errors import NotReadyError
from app.infrastructure import database
from app.schemas.health import HealthResponse, ReadinessResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe."""
    return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc))


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request):
    """Readiness probe - bootstrap outcome plus database connectivity."""
    outcome = getattr(request.app.state, "bootstrap_outcome", None)
    if outcome is BootstrapOutcome.FAILED:
        return _not_ready(NotReadyError("bootstrap_failed"))

    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return _not_ready(NotReadyError("database_unavailable"))

    return ReadinessResponse(
        status="ready",
        checks={
            "database": "healthy",
            "bootstrap": outcome.value if outcome else "skipped",
        },
    )


def _not_ready(exc: NotReadyError) -> JSONResponse:
    logger.warning(exc.message, extra={"error_code": exc.code})
    return JSONResponse(
        status_code=exc.http_status,
        content={"status": "not_ready", "reason": exc.reason},
    )
