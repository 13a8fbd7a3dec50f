"""Error Hierarchy - typed, categorized exceptions for storefront infrastructure failures.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Policy rejections (400-level) carry fixed, non-sensitive messages
    - to_response() produces the uniform {message, error} envelope

Design Decisions:
    - Single hierarchy with StorefrontError base: one global handler catches all
    - ErrorContext keeps request metadata out of the message text
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    POLICY = "policy"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    UNAVAILABLE = "unavailable"


@dataclass
class ErrorContext:
    """Request metadata attached to an error for logging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    client_id: str | None = None
    path: str | None = None
    retry_after_seconds: int | None = None


class StorefrontError(Exception):
    """Base exception for all storefront infrastructure errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the uniform REST error envelope."""
        return {
            "message": self.message,
            "error": {
                "code": self.code,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            },
        }


# ─── Policy Errors (400-level) ──────────────────────────────────

class RateLimitExceededError(StorefrontError):
    """Client identity exhausted its request budget for the current window."""
    def __init__(
        self, message: str, retry_after_seconds: int,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_seconds = retry_after_seconds
        super().__init__(
            message, "RATE_LIMITED", ErrorCategory.POLICY,
            ErrorSeverity.WARNING, ctx, 429,
        )


class PayloadTooLargeError(StorefrontError):
    """Request body exceeds the configured parser limit."""
    def __init__(self, limit_bytes: int, context: ErrorContext | None = None):
        super().__init__(
            "Request entity too large", "PAYLOAD_TOO_LARGE",
            ErrorCategory.POLICY, ErrorSeverity.WARNING, context, 413,
        )
        self.limit_bytes = limit_bytes


class ResourceNotFoundError(StorefrontError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(StorefrontError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class BootstrapError(StorefrontError):
    """Schema or seed application failed."""
    def __init__(self, phase: str, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Bootstrap {phase} failed: {message}",
            "BOOTSTRAP_FAILED", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.phase = phase


class NotReadyError(StorefrontError):
    """Service cannot serve consistent data yet."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Service not ready: {reason}", "NOT_READY",
            ErrorCategory.UNAVAILABLE, ErrorSeverity.ERROR, context, 503,
        )
        self.reason = reason
