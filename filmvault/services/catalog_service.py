"""Catalog Service — item lifecycle, listings and purchase-derived deletion guard.

Invariants:
    - Titles and descriptions are stored trimmed; titles are never empty
    - Prices are never negative, on create and on update
    - An item with purchases cannot be deleted (COUNT-based guard, FK as backstop)
    - Listings are newest first and carry total / total_pages from one snapshot

Design Decisions:
    - Service owns the transaction (commit here, repositories only flush)
    - purchase_item delegates to PurchaseWorkflow: cross-entity rules live in one place
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from filmvault.core.domain_types import ItemChanges
from filmvault.core.enforce_catalog import (
    check_price, check_price_range, normalize_title,
)
from filmvault.core.errors import (
    ConflictError, ErrorContext, NotFoundError, ValidationError,
)
from filmvault.core.pagination import Page, PageRequest
from filmvault.models.item import Item
from filmvault.models.purchase import Purchase
from filmvault.repositories import ItemRepository, PurchaseRepository
from filmvault.services.purchase_workflow import PurchaseWorkflow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemStats:
    item_id: str
    total_purchases: int


class CatalogService:
    """Item operations for the catalog API."""

    def __init__(
        self, db: AsyncSession, workflow: PurchaseWorkflow | None = None,
    ):
        self.db = db
        self.items = ItemRepository(db)
        self.purchases = PurchaseRepository(db)
        self.workflow = workflow or PurchaseWorkflow(db)

    async def create_item(
        self,
        title: str,
        description: str,
        price: int,
        content_url: str,
        registrant_id: str,
    ) -> Item:
        check_price(price)
        title = normalize_title(title)

        item = await self.items.create(
            title=title,
            description=(description or "").strip(),
            price=price,
            content_url=content_url,
            registrant_id=registrant_id,
        )
        await self.db.commit()
        logger.info("Item created", extra={"item_id": item.id})
        return item

    async def get_item(self, item_id: str) -> Item:
        item = await self.items.find_by_id(item_id)
        if item is None:
            raise NotFoundError("Item", item_id)
        return item

    async def list_items(self, page=None, page_size=None) -> Page[Item]:
        return await self.items.find_page(PageRequest.normalize(page, page_size))

    async def search_items(
        self, query: str, page=None, page_size=None,
    ) -> Page[Item]:
        if not query or not query.strip():
            raise ValidationError("Search query is required", field="q")
        return await self.items.search(
            query.strip(), PageRequest.normalize(page, page_size),
        )

    async def list_items_by_price_range(
        self, min_price: int = 0, max_price: int = 999_999,
        page=None, page_size=None,
    ) -> Page[Item]:
        check_price_range(min_price, max_price)
        return await self.items.find_by_price_range(
            min_price, max_price, PageRequest.normalize(page, page_size),
        )

    async def get_item_with_purchases(
        self, item_id: str,
    ) -> tuple[Item, list[Purchase]]:
        """The item plus its purchases, each with the purchasing account loaded."""
        item = await self.get_item(item_id)
        return item, await self.purchases.for_item_with_accounts(item_id)

    async def update_item(self, item_id: str, changes: ItemChanges) -> Item:
        """Apply only the fields present in changes; the rest stay untouched."""
        await self.get_item(item_id)

        values = changes.present()
        if "price" in values:
            check_price(values["price"])
        if "title" in values:
            values["title"] = normalize_title(values["title"])
        if "description" in values:
            values["description"] = (values["description"] or "").strip()

        item = await self.items.update(item_id, values)
        await self.db.commit()
        return item

    async def delete_item(self, item_id: str) -> None:
        await self.get_item(item_id)

        purchase_count = await self.purchases.count_for_item(item_id)
        if purchase_count > 0:
            raise ConflictError(
                "Cannot delete item with existing purchases",
                code="ITEM_HAS_PURCHASES",
                context=ErrorContext(item_id=item_id),
            )

        await self.items.delete(item_id)
        await self.db.commit()
        logger.info("Item deleted", extra={"item_id": item_id})

    async def get_item_stats(self, item_id: str) -> ItemStats:
        await self.get_item(item_id)
        return ItemStats(
            item_id=item_id,
            total_purchases=await self.purchases.count_for_item(item_id),
        )

    async def purchase_item(self, item_id: str, account_id: str) -> Purchase:
        return await self.workflow.purchase(account_id, item_id)
