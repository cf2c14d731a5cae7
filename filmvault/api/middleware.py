"""Request Middleware — request ids, completion logging and slow-request warnings.

Invariants:
    - Every response carries X-Request-Id (echoed from the request or generated)
    - request.state.request_id is set before any handler or error handler runs
    - Completed requests log at INFO; >= 400 at WARNING; slow ones add a WARNING

Design Decisions:
    - Function middleware via @app.middleware("http"): no extra dependency
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"


def register_request_middleware(app: FastAPI, slow_request_ms: int = 1000) -> None:
    """Attach request-id and access-log middleware to the app."""

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()
        log_extra = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else None,
        }

        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                "Request crashed",
                extra={**log_extra, "duration_ms": _elapsed_ms(started)},
                exc_info=True,
            )
            raise

        duration_ms = _elapsed_ms(started)
        response.headers[REQUEST_ID_HEADER] = request_id
        extra = {
            **log_extra,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }
        if response.status_code >= 400:
            logger.warning("Request failed", extra=extra)
        else:
            logger.info("Request completed", extra=extra)
        if duration_ms > slow_request_ms:
            logger.warning(
                f"Slow request detected (> {slow_request_ms}ms)", extra=extra,
            )
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
