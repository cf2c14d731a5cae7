"""Error Hierarchy — typed, categorized exceptions for all FilmVault failure modes.

Invariants:
    - Every error has a code (str), kind (ErrorKind), category, severity and http_status
    - Operational errors (400/404/409/429) are caller-correctable; Internal (500) is not
    - to_response() produces the REST envelope: {success, error: {message, code, kind}}
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with FilmVaultError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorKind is the stable, API-visible classification; code is the finer-grained tag
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """API-visible error kinds. Each maps to exactly one HTTP status."""
    VALIDATION = "ValidationError"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    TOO_MANY_REQUESTS = "TooManyRequests"
    INTERNAL = "Internal"


KIND_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.TOO_MANY_REQUESTS: 429,
    ErrorKind.INTERNAL: 500,
}


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    RATE_LIMIT = "rate_limit"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    account_id: str | None = None
    item_id: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_seconds: int | None = None


class FilmVaultError(Exception):
    """Base exception for all FilmVault errors."""

    def __init__(
        self,
        message: str,
        code: str,
        kind: ErrorKind,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.kind = kind
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    @property
    def http_status(self) -> int:
        return KIND_STATUS[self.kind]

    @property
    def operational(self) -> bool:
        return self.kind is not ErrorKind.INTERNAL

    def to_response(self) -> dict:
        """Convert to standardized REST error envelope."""
        return {
            "success": False,
            "error": {
                "message": self.message,
                "code": self.http_status,
                "kind": self.kind.value,
            },
        }


# ─── Operational Errors (400-level) ─────────────────────────────

class ValidationError(FilmVaultError):
    """Caller input is malformed or violates a domain rule."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorKind.VALIDATION,
            ErrorCategory.VALIDATION, ErrorSeverity.WARNING, context,
        )
        self.field = field


class NotFoundError(FilmVaultError):
    """Referenced entity does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str | None = None,
        context: ErrorContext | None = None,
    ):
        message = (
            f"{resource_type} not found" if resource_id is None
            else f"{resource_type} '{resource_id}' not found"
        )
        super().__init__(
            message, "RESOURCE_NOT_FOUND", ErrorKind.NOT_FOUND,
            ErrorCategory.RESOURCE_NOT_FOUND, ErrorSeverity.WARNING, context,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(FilmVaultError):
    """Uniqueness or dependent-record rule violated."""
    def __init__(
        self, message: str, code: str = "CONFLICT",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorKind.CONFLICT,
            ErrorCategory.CONFLICT, ErrorSeverity.WARNING, context,
        )


class TooManyRequestsError(FilmVaultError):
    """Request rejected by the admission counter."""
    def __init__(
        self, message: str, retry_after_seconds: int | None = None,
        headers: dict[str, str] | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_seconds = retry_after_seconds
        super().__init__(
            message, "RATE_LIMITED", ErrorKind.TOO_MANY_REQUESTS,
            ErrorCategory.RATE_LIMIT, ErrorSeverity.INFO, ctx,
        )
        self.headers = dict(headers or {})
        if retry_after_seconds is not None:
            self.headers["Retry-After"] = str(retry_after_seconds)


# ─── Non-operational Errors (500-level) ─────────────────────────

class InternalError(FilmVaultError):
    """Bug or infrastructure fault. Detail is withheld outside development."""
    def __init__(
        self, message: str, code: str = "INTERNAL_ERROR",
        category: ErrorCategory = ErrorCategory.INTERNAL,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorKind.INTERNAL,
            category, ErrorSeverity.CRITICAL, context,
        )
