"""API Dependencies — service providers, caller identity and rate admission.

Invariants:
    - Services are built per request around the request's AsyncSession
    - Settings and the admission registry are read from app.state, never module globals
    - Rate-limit headers are set on every admitted and rejected response,
      including error responses raised after admission (via request.state)

Design Decisions:
    - rate_limited(group) returns a Depends() so routes declare admission declaratively
    - Caller key honours the first X-Forwarded-For hop (deployments sit behind a proxy)
"""

import logging

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from filmvault.config import Settings
from filmvault.core.errors import TooManyRequestsError
from filmvault.core.rate_admission import AdmissionDecision, RateAdmissionRegistry
from filmvault.infrastructure.database import get_db
from filmvault.services.account_service import AccountService
from filmvault.services.catalog_service import CatalogService
from filmvault.services.purchase_workflow import AutoProvisionPolicy, PurchaseWorkflow

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_admission(request: Request) -> RateAdmissionRegistry:
    return request.app.state.rate_admission


def client_key(request: Request) -> str:
    """Caller identity used as the rate-limit key."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limited(group: str):
    """Dependency admitting the request against the named policy group."""

    async def admit(
        request: Request,
        response: Response,
        registry: RateAdmissionRegistry = Depends(get_rate_admission),
    ) -> AdmissionDecision:
        counter = registry.counter(group)
        decision = counter.admit(client_key(request))
        response.headers.update(decision.headers())
        # Error responses are rebuilt by render_error, which re-applies these.
        request.state.rate_limit_headers = decision.headers()
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={
                    "rate_limit_group": group,
                    "client": client_key(request),
                    "path": request.url.path,
                },
            )
            raise TooManyRequestsError(
                decision.message,
                retry_after_seconds=decision.retry_after(counter.now()),
                headers=decision.headers(),
            )
        return decision

    return Depends(admit)


def get_purchase_workflow(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PurchaseWorkflow:
    return PurchaseWorkflow(db, AutoProvisionPolicy.from_settings(settings))


def get_catalog_service(
    db: AsyncSession = Depends(get_db),
    workflow: PurchaseWorkflow = Depends(get_purchase_workflow),
) -> CatalogService:
    return CatalogService(db, workflow)


def get_account_service(db: AsyncSession = Depends(get_db)) -> AccountService:
    return AccountService(db)
