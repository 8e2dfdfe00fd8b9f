"""Error Hierarchy — typed, categorized exceptions for every Twincord failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are caller mistakes; infrastructure errors (500-level) are operational
    - to_response() produces the REST envelope {success: false, error, code}
    - to_sse_event() produces the payload of an `error`-tagged stream event
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with TwincordError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields travel with the error
      without coupling to the logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories, one per taxonomy entry."""
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    UNAVAILABLE = "unavailable"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    community_id: str | None = None
    user_id: str | None = None
    debug_info: dict[str, Any] | None = None


class TwincordError(Exception):
    """Base exception for all Twincord errors."""

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
        """Convert to the uniform REST failure envelope."""
        return {
            "success": False,
            "error": self.message,
            "code": self.code,
        }

    def to_sse_event(self) -> dict:
        """Convert to the body of an `error` stream event."""
        return {
            "success": False,
            "error": self.message,
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidArgumentError(TwincordError):
    """Missing or malformed input."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ARGUMENT", ErrorCategory.INVALID_ARGUMENT,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class ResourceNotFoundError(TwincordError):
    """Unknown community, user or join code."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class PermissionDeniedError(TwincordError):
    """Caller is authenticated but not allowed to act on the community."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "PERMISSION_DENIED", ErrorCategory.PERMISSION_DENIED,
            ErrorSeverity.WARNING, context, 403,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class CodeGenerationExhaustedError(TwincordError):
    """No unused join code found within the retry budget."""
    def __init__(self, attempts: int, context: ErrorContext | None = None):
        super().__init__(
            "Unable to generate unique code",
            "RESOURCE_EXHAUSTED", ErrorCategory.RESOURCE_EXHAUSTED,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.attempts = attempts


class StatsUnavailableError(TwincordError):
    """One of the stats counts failed; no partial snapshot is returned."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Failed to load stats",
            "UNAVAILABLE", ErrorCategory.UNAVAILABLE,
            ErrorSeverity.ERROR, context, 503,
        )


class ChangeFeedError(TwincordError):
    """Store change-notification feed failed after attachment."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Change feed failed: {message}",
            "CHANGE_FEED_ERROR", ErrorCategory.UNAVAILABLE,
            ErrorSeverity.WARNING, context, 503,
        )


class DatabaseError(TwincordError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
