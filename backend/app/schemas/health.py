"""Health Schemas - response models for the liveness and readiness probes."""

from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Liveness - always OK while the process is up."""
    status: str = "OK"
    timestamp: datetime


class ReadinessResponse(BaseModel):
    status: str
    checks: dict[str, str]
