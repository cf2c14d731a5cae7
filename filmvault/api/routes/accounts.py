"""Account Routes — registration, lookup, update, deletion and purchase views.

Invariants:
    - Admission: account_create on POST /accounts, query on /accounts/search
    - /search is declared before /{account_id}
    - Account ids are free-form strings (caller-supplied or auto-provisioned)
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from filmvault.api.dependencies import get_account_service, rate_limited
from filmvault.core.domain_types import AccountChanges
from filmvault.schemas.account import AccountCreate, AccountUpdate
from filmvault.schemas.common import envelope, page_envelope
from filmvault.services.account_service import AccountService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/accounts", tags=["accounts"])


def _iso(value) -> str | None:
    return value.isoformat() if value else None


@router.post(
    "", status_code=status.HTTP_201_CREATED,
    dependencies=[rate_limited("account_create")],
)
async def create_account(
    body: AccountCreate,
    service: AccountService = Depends(get_account_service),
):
    account = await service.create_account(
        body.email, body.name, account_id=body.account_id,
    )
    return envelope(account.to_dict(), "Account created successfully")


@router.get("")
async def list_accounts(
    page: str | None = Query(None),
    page_size: str | None = Query(None),
    limit: str | None = Query(None),
    service: AccountService = Depends(get_account_service),
):
    result = await service.list_accounts(page, page_size or limit)
    return page_envelope(result, lambda a: a.to_dict())


@router.get("/search", dependencies=[rate_limited("query")])
async def find_account_by_email(
    email: str = Query(..., min_length=3),
    service: AccountService = Depends(get_account_service),
):
    account = await service.get_account_by_email(email)
    return envelope(account.to_dict())


@router.get("/{account_id}")
async def get_account(
    account_id: str, service: AccountService = Depends(get_account_service),
):
    account = await service.get_account(account_id)
    return envelope(account.to_dict())


@router.put("/{account_id}")
async def update_account(
    account_id: str,
    body: AccountUpdate,
    service: AccountService = Depends(get_account_service),
):
    changes = AccountChanges.from_mapping(body.model_dump(exclude_unset=True))
    account = await service.update_account(account_id, changes)
    return envelope(account.to_dict(), "Account updated successfully")


@router.delete("/{account_id}")
async def delete_account(
    account_id: str, service: AccountService = Depends(get_account_service),
):
    await service.delete_account(account_id)
    return envelope(message="Account deleted successfully")


@router.get("/{account_id}/items")
async def get_purchased_items(
    account_id: str,
    page: str | None = Query(None),
    page_size: str | None = Query(None),
    limit: str | None = Query(None),
    service: AccountService = Depends(get_account_service),
):
    """Items this account purchased, most recent purchase first."""
    result = await service.get_purchased_items(
        account_id, page, page_size or limit,
    )
    return page_envelope(result, lambda i: i.to_dict())


@router.get("/{account_id}/items/{item_id}/check")
async def check_purchased(
    account_id: str,
    item_id: str,
    service: AccountService = Depends(get_account_service),
):
    purchased = await service.has_purchased(account_id, item_id)
    return envelope({"purchased": purchased})


@router.get("/{account_id}/stats")
async def get_account_stats(
    account_id: str, service: AccountService = Depends(get_account_service),
):
    stats = await service.get_account_stats(account_id)
    return envelope({
        "total_purchases": stats.total_purchases,
        "total_spent": stats.total_spent,
        "first_purchase": _iso(stats.first_purchase),
        "last_purchase": _iso(stats.last_purchase),
    })


@router.get("/{account_id}/purchase-history")
async def get_purchase_history(
    account_id: str, service: AccountService = Depends(get_account_service),
):
    history = await service.get_purchase_history(account_id)
    return envelope([p.to_dict() for p in history])
