"""Error Taxonomy — maps any raised exception to a stable (kind, status, message, operational).

Invariants:
    - map_error() is total: every exception yields a MappedError, unknown ones are Internal/500
    - Unique-constraint violations -> Conflict/409; foreign-key violations -> ValidationError/400
    - Missing record on update/delete (NoResultFound, StaleDataError) -> NotFound/404
    - Connection / pool / init failures -> Internal/500, non-operational
    - Messages for non-operational errors never carry driver text

Design Decisions:
    - SQLSTATE first (asyncpg, psycopg expose .sqlstate / .pgcode), driver message second
      (SQLite only reports text) (ADR: production Postgres, test SQLite, same mapping)
    - translate_storage_error() returns a FilmVaultError so services can re-raise
      a domain error from a storage failure without duplicating the classification
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlalchemy.exc import (
    DataError,
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    NoResultFound,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm.exc import StaleDataError

from filmvault.core.errors import (
    ConflictError,
    ErrorCategory,
    ErrorKind,
    FilmVaultError,
    InternalError,
    KIND_STATUS,
    NotFoundError,
    ValidationError,
)


GENERIC_INTERNAL_MESSAGE = "Internal server error"

_UNIQUE_SQLSTATE = "23505"
_FOREIGN_KEY_SQLSTATE = "23503"


class ConstraintKind(str, Enum):
    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"
    OTHER = "other"


@dataclass(frozen=True)
class MappedError:
    """The rendering contract handed to the HTTP layer."""
    kind: ErrorKind
    http_status: int
    message: str
    operational: bool
    code: str = "INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)


def _driver_error(exc: DBAPIError) -> Any:
    return getattr(exc, "orig", None)


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = _driver_error(exc)
    for attr in ("sqlstate", "pgcode"):
        value = getattr(orig, attr, None)
        if isinstance(value, str) and value:
            return value
    return None


def classify_integrity_error(exc: IntegrityError) -> ConstraintKind:
    """Decide which constraint an IntegrityError violated."""
    state = _sqlstate(exc)
    if state == _UNIQUE_SQLSTATE:
        return ConstraintKind.UNIQUE
    if state == _FOREIGN_KEY_SQLSTATE:
        return ConstraintKind.FOREIGN_KEY

    text = str(_driver_error(exc) or exc).lower()
    if "unique" in text or "duplicate key" in text:
        return ConstraintKind.UNIQUE
    if "foreign key" in text:
        return ConstraintKind.FOREIGN_KEY
    return ConstraintKind.OTHER


def constraint_target(exc: IntegrityError) -> str | None:
    """Best-effort name of the violated column(s) for error details."""
    orig = _driver_error(exc)
    constraint = getattr(orig, "constraint_name", None)
    if constraint:
        return constraint
    text = str(orig or "")
    marker = "constraint failed:"
    if marker in text:
        return text.split(marker, 1)[1].strip()
    return None


def translate_storage_error(exc: SQLAlchemyError) -> FilmVaultError:
    """Translate a SQLAlchemy failure into the domain error hierarchy."""
    if isinstance(exc, IntegrityError):
        kind = classify_integrity_error(exc)
        target = constraint_target(exc)
        debug = {"constraint": target} if target else None
        if kind is ConstraintKind.UNIQUE:
            err: FilmVaultError = ConflictError(
                f"Duplicate value for {target}" if target else "Duplicate value",
                code="UNIQUE_VIOLATION",
            )
        elif kind is ConstraintKind.FOREIGN_KEY:
            err = ValidationError(
                "Invalid reference: related record does not exist",
            )
            err.code = "FOREIGN_KEY_VIOLATION"
        else:
            err = ValidationError("Invalid data provided")
            err.code = "CONSTRAINT_VIOLATION"
        err.context.debug_info = debug
        return err

    if isinstance(exc, (NoResultFound, StaleDataError)):
        return NotFoundError("Record")

    if isinstance(exc, DataError):
        err = ValidationError("Invalid data provided")
        err.code = "DATA_ERROR"
        return err

    if isinstance(
        exc,
        (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError),
    ):
        return InternalError(
            "Database connection error",
            code="DATABASE_UNAVAILABLE", category=ErrorCategory.DATABASE,
        )

    return InternalError(
        "Unknown database error occurred",
        code="DATABASE_ERROR", category=ErrorCategory.DATABASE,
    )


def map_error(exc: BaseException) -> MappedError:
    """Map any exception to the (kind, status, message, operational) contract."""
    if isinstance(exc, SQLAlchemyError):
        exc = translate_storage_error(exc)

    if isinstance(exc, FilmVaultError):
        details: dict[str, Any] = {}
        if exc.context.debug_info:
            details.update(exc.context.debug_info)
        if getattr(exc, "field", None):
            details["field"] = exc.field
        return MappedError(
            kind=exc.kind,
            http_status=exc.http_status,
            message=exc.message,
            operational=exc.operational,
            code=exc.code,
            details=details,
        )

    return MappedError(
        kind=ErrorKind.INTERNAL,
        http_status=KIND_STATUS[ErrorKind.INTERNAL],
        message=GENERIC_INTERNAL_MESSAGE,
        operational=False,
        details={"exception": type(exc).__name__},
    )


def is_unique_violation(exc: BaseException) -> bool:
    return (
        isinstance(exc, IntegrityError)
        and classify_integrity_error(exc) is ConstraintKind.UNIQUE
    )
