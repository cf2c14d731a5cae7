"""FilmVault API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers render every failure as the error envelope
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager
    - Settings and the rate admission registry live on app.state

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - create_app(settings) factory: tests build isolated apps with their own
      settings and admission counters
    - Admission registry built with the app, not in the lifespan, so it exists
      even when a test transport skips lifespan events
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from filmvault.api.error_handlers import register_error_handlers
from filmvault.api.middleware import register_request_middleware
from filmvault.api.routes import accounts, health, items
from filmvault.config import Settings, get_settings
from filmvault.core.rate_admission import RateAdmissionRegistry
from filmvault.infrastructure.database import close_db, init_db
from filmvault.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)

API_TITLE = "FilmVault API"
API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    app.state.db_manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(f"FilmVault API started ({settings.environment})")
    yield
    logger.info("FilmVault API shutting down")
    await close_db()
    app.state.db_manager = None


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=API_TITLE, version=API_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.rate_admission = RateAdmissionRegistry(
        settings.admission_policies(), max_keys=settings.rate_limit_max_keys,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-Id", "Retry-After",
            "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset",
        ],
    )
    register_request_middleware(app, settings.slow_request_ms)
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(items.router)
    app.include_router(accounts.router)

    @app.get("/")
    async def root():
        return {
            "success": True,
            "message": "FilmVault API",
            "version": API_VERSION,
            "endpoints": {
                "items": "/api/v1/items",
                "accounts": "/api/v1/accounts",
                "health": "/api/v1/health/",
            },
        }

    return app


app = create_app()
