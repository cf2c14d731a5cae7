"""Health Routes — liveness and readiness for the FilmVault API.

Invariants:
    - GET /health/ answers 200 while the process serves requests; it never touches the DB
    - GET /health/ready answers 503 until a database manager is attached and SELECT 1 succeeds
    - Both bodies report the running version and environment

Design Decisions:
    - The manager is read from app.state (set by the lifespan), so tests and
      multiple app instances never share it through a module global
    - Readiness also lists the admission groups, confirming the registry was built
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from filmvault.api.dependencies import get_app_settings, get_rate_admission
from filmvault.config import Settings
from filmvault.core.rate_admission import RateAdmissionRegistry
from filmvault.infrastructure.database import DatabaseSessionManager

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


def get_db_manager(request: Request) -> DatabaseSessionManager | None:
    return getattr(request.app.state, "db_manager", None)


def _identity(request: Request, settings: Settings) -> dict:
    return {
        "service": request.app.title,
        "version": request.app.version,
        "environment": settings.environment,
    }


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness(
    request: Request, settings: Settings = Depends(get_app_settings),
):
    return {"status": "healthy", **_identity(request, settings)}


@router.get("/ready")
async def readiness(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    registry: RateAdmissionRegistry = Depends(get_rate_admission),
    manager: DatabaseSessionManager | None = Depends(get_db_manager),
):
    """Ready when the database answers; 503 otherwise."""
    if manager is None or not await manager.health_check():
        logger.warning("Readiness check failed: database unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
                **_identity(request, settings),
            },
        )
    return {
        "status": "ready",
        **_identity(request, settings),
        "checks": {
            "database": "healthy",
            "rate_limit_groups": registry.groups(),
        },
    }
