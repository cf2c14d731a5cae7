"""Error Handlers — global exception handlers rendering the error envelope.

Invariants:
    - Every handler renders through map_error: one taxonomy, one envelope shape
    - Operational errors log at WARNING; non-operational at ERROR with traceback
    - Outside development, non-operational errors never leak messages or details
    - Unknown routes render the envelope with 404 "Route not found"

Design Decisions:
    - Five handler layers: FilmVaultError (domain), RequestValidationError (Pydantic),
      SQLAlchemyError (storage), HTTPException (routing), Exception (catch-all)
    - Extracted from main.py to keep the app factory small
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from filmvault.core.errors import ErrorKind, FilmVaultError, KIND_STATUS
from filmvault.infrastructure.error_taxonomy import (
    GENERIC_INTERNAL_MESSAGE, MappedError, map_error,
)

logger = logging.getLogger(__name__)

_STATUS_KIND = {code: kind for kind, code in KIND_STATUS.items()}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_storage_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _is_development(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings and settings.is_development)


def render_error(
    request: Request, exc: BaseException, mapped: MappedError | None = None,
) -> JSONResponse:
    """Log and render any exception as the error envelope."""
    mapped = mapped or map_error(exc)
    request_id = getattr(request.state, "request_id", None)
    extra = {
        "request_id": request_id,
        "path": request.url.path,
        "method": request.method,
        "status_code": mapped.http_status,
        "error_code": mapped.code,
        "error_kind": mapped.kind.value,
    }
    if mapped.operational:
        logger.warning(f"Operational error: {mapped.message}", extra=extra)
    else:
        logger.error(
            f"System error: {exc}", extra=extra,
            exc_info=(type(exc), exc, exc.__traceback__),
        )

    dev = _is_development(request)
    message = mapped.message
    if not mapped.operational and not dev:
        message = GENERIC_INTERNAL_MESSAGE

    error: dict = {
        "message": message,
        "code": mapped.http_status,
        "kind": mapped.kind.value,
    }
    if dev:
        details = dict(mapped.details)
        if not mapped.operational:
            details["exception"] = repr(exc)
        if details:
            error["details"] = details

    content: dict = {"success": False, "error": error}
    if request_id:
        content["requestId"] = request_id
    headers = dict(getattr(request.state, "rate_limit_headers", None) or {})
    headers.update(getattr(exc, "headers", None) or {})
    return JSONResponse(
        status_code=mapped.http_status, content=content, headers=headers or None,
    )


def _register_domain_error_handler(app: FastAPI) -> None:
    """Register FilmVault domain/infrastructure error handler."""

    @app.exception_handler(FilmVaultError)
    async def domain_error_handler(request: Request, exc: FilmVaultError):
        return render_error(request, exc)


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        details = [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ]
        mapped = MappedError(
            kind=ErrorKind.VALIDATION,
            http_status=status.HTTP_400_BAD_REQUEST,
            message=", ".join(
                f"{d['field']}: {d['message']}" for d in details
            ) or "Invalid request data",
            operational=True,
            code="VALIDATION_ERROR",
            details={"fields": details},
        )
        return render_error(request, exc, mapped)


def _register_storage_error_handler(app: FastAPI) -> None:
    """Register handler for storage failures that escaped the services."""

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        return render_error(request, exc)


def _register_http_error_handler(app: FastAPI) -> None:
    """Register routing errors (unknown route, wrong method)."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = "Route not found"
        else:
            message = str(exc.detail)
        mapped = MappedError(
            kind=_STATUS_KIND.get(exc.status_code, ErrorKind.VALIDATION),
            http_status=exc.status_code,
            message=message,
            operational=exc.status_code < 500,
            code="HTTP_ERROR",
        )
        return render_error(request, exc, mapped)


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details outside development."""
        return render_error(request, exc)
