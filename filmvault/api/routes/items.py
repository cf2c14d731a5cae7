"""Item Routes — catalog CRUD, search, stats and the purchase endpoint.

Invariants:
    - Request bodies validated by Pydantic before reaching the service
    - Admission: item_create on POST /items, purchase on POST /items/{id}/purchase,
      query on search and price-range lookups
    - Static paths (/search, /price-range) are declared before /{item_id}

Design Decisions:
    - item_id typed as UUID: malformed ids are rejected as 400 before any query
    - Purchaser identity from body.account_id, else the X-Account-Id header
    - Registrant identity from X-Account-Id, else body.registrant_id, else "anonymous"
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Header, Query, status

from filmvault.api.dependencies import get_catalog_service, rate_limited
from filmvault.core.domain_types import ItemChanges
from filmvault.core.errors import ValidationError
from filmvault.schemas.common import envelope, page_envelope
from filmvault.schemas.item import MAX_PRICE, ItemCreate, ItemUpdate, PurchaseRequest
from filmvault.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/items", tags=["items"])

ANONYMOUS_REGISTRANT = "anonymous"


def _serialize_item(item) -> dict:
    return item.to_dict()


@router.get("")
async def list_items(
    page: str | None = Query(None),
    page_size: str | None = Query(None),
    limit: str | None = Query(None),
    service: CatalogService = Depends(get_catalog_service),
):
    """List items, newest first."""
    result = await service.list_items(page, page_size or limit)
    return page_envelope(result, _serialize_item)


@router.get("/search", dependencies=[rate_limited("query")])
async def search_items(
    q: str = Query(""),
    page: str | None = Query(None),
    page_size: str | None = Query(None),
    limit: str | None = Query(None),
    service: CatalogService = Depends(get_catalog_service),
):
    """Case-insensitive search over titles and descriptions."""
    result = await service.search_items(q, page, page_size or limit)
    return page_envelope(result, _serialize_item)


@router.get("/price-range", dependencies=[rate_limited("query")])
async def items_by_price_range(
    min_price: int = Query(0),
    max_price: int = Query(MAX_PRICE),
    page: str | None = Query(None),
    page_size: str | None = Query(None),
    limit: str | None = Query(None),
    service: CatalogService = Depends(get_catalog_service),
):
    """Items priced within [min_price, max_price], cheapest first."""
    result = await service.list_items_by_price_range(
        min_price, max_price, page, page_size or limit,
    )
    return page_envelope(result, _serialize_item)


@router.post(
    "", status_code=status.HTTP_201_CREATED,
    dependencies=[rate_limited("item_create")],
)
async def create_item(
    body: ItemCreate,
    x_account_id: str | None = Header(None),
    service: CatalogService = Depends(get_catalog_service),
):
    """Register a new item in the catalog."""
    item = await service.create_item(
        title=body.title,
        description=body.description,
        price=body.price,
        content_url=str(body.content_url),
        registrant_id=x_account_id or body.registrant_id or ANONYMOUS_REGISTRANT,
    )
    return envelope(item.to_dict(), "Item created successfully")


@router.get("/{item_id}")
async def get_item(
    item_id: UUID, service: CatalogService = Depends(get_catalog_service),
):
    item = await service.get_item(str(item_id))
    return envelope(item.to_dict())


@router.get("/{item_id}/stats")
async def get_item_stats(
    item_id: UUID, service: CatalogService = Depends(get_catalog_service),
):
    stats = await service.get_item_stats(str(item_id))
    return envelope({
        "item_id": stats.item_id,
        "total_purchases": stats.total_purchases,
    })


@router.get("/{item_id}/purchases")
async def get_item_purchases(
    item_id: UUID, service: CatalogService = Depends(get_catalog_service),
):
    """The item with every purchase and its purchaser."""
    item, purchases = await service.get_item_with_purchases(str(item_id))
    data = item.to_dict()
    data["purchases"] = [
        {
            **p.to_dict(include_item=False),
            "account": {
                "id": p.account.id,
                "name": p.account.name,
                "email": p.account.email,
            },
        }
        for p in purchases
    ]
    return envelope(data)


@router.post("/{item_id}/purchase", dependencies=[rate_limited("purchase")])
async def purchase_item(
    item_id: UUID,
    body: PurchaseRequest | None = Body(None),
    x_account_id: str | None = Header(None),
    service: CatalogService = Depends(get_catalog_service),
):
    """Record a purchase of item_id for the calling account."""
    account_id = (body.account_id if body else None) or x_account_id
    if not account_id:
        raise ValidationError(
            "account_id is required (body or X-Account-Id header)",
            field="account_id",
        )
    purchase = await service.purchase_item(str(item_id), account_id)
    return envelope(purchase.to_dict(), "Item purchased successfully")


@router.put("/{item_id}")
async def update_item(
    item_id: UUID,
    body: ItemUpdate,
    service: CatalogService = Depends(get_catalog_service),
):
    changes = ItemChanges.from_mapping(
        body.model_dump(mode="json", exclude_unset=True),
    )
    item = await service.update_item(str(item_id), changes)
    return envelope(item.to_dict(), "Item updated successfully")


@router.delete("/{item_id}")
async def delete_item(
    item_id: UUID, service: CatalogService = Depends(get_catalog_service),
):
    await service.delete_item(str(item_id))
    return envelope(message="Item deleted successfully")
