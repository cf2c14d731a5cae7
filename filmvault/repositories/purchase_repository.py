"""Purchase Repository — pair lookups, per-item counts, per-account history.

Invariants:
    - create_purchase relies on the (account_id, item_id) unique constraint;
      a duplicate raises IntegrityError from flush()
    - Counts use COUNT(*), never materialized rows
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from filmvault.core.pagination import Page, PageRequest
from filmvault.models.item import Item
from filmvault.models.purchase import Purchase
from filmvault.repositories.base import BaseRepository, paginate_select


class PurchaseRepository(BaseRepository[Purchase]):
    model = Purchase

    async def create_purchase(self, account_id: str, item: Item) -> Purchase:
        """Insert the ledger entry with its item already attached."""
        return await self.create(account_id=account_id, item_id=item.id, item=item)

    async def find_by_account_and_item(
        self, account_id: str, item_id: str,
    ) -> Purchase | None:
        result = await self.db.execute(
            select(Purchase)
            .where(Purchase.account_id == account_id)
            .where(Purchase.item_id == item_id)
        )
        return result.scalar_one_or_none()

    async def has_purchased(self, account_id: str, item_id: str) -> bool:
        return await self.find_by_account_and_item(account_id, item_id) is not None

    async def count_for_item(self, item_id: str) -> int:
        return await self.count(Purchase.item_id == item_id)

    async def count_for_account(self, account_id: str) -> int:
        return await self.count(Purchase.account_id == account_id)

    async def history_for_account(self, account_id: str) -> list[Purchase]:
        """All purchases of an account with their items, newest first."""
        result = await self.db.execute(
            select(Purchase)
            .where(Purchase.account_id == account_id)
            .order_by(Purchase.created_at.desc(), Purchase.id.desc())
        )
        return list(result.scalars().all())

    async def purchased_items_page(
        self, account_id: str, page: PageRequest,
    ) -> Page[Item]:
        """Items the account bought, ordered by purchase time descending."""
        query = (
            select(Item)
            .join(Purchase, Purchase.item_id == Item.id)
            .where(Purchase.account_id == account_id)
            .order_by(Purchase.created_at.desc(), Purchase.id.desc())
        )
        rows, total = await paginate_select(self.db, query, page)
        return Page(
            items=rows, total=total, page=page.page, page_size=page.page_size,
        )

    async def ledger_for_account(
        self, account_id: str,
    ) -> list[tuple[datetime, int]]:
        """(purchased_at, current item price) pairs for stats aggregation."""
        result = await self.db.execute(
            select(Purchase.created_at, Item.price)
            .join(Item, Item.id == Purchase.item_id)
            .where(Purchase.account_id == account_id)
            .order_by(Purchase.created_at.asc())
        )
        return [(row[0], row[1]) for row in result.all()]

    async def for_item_with_accounts(self, item_id: str) -> list[Purchase]:
        result = await self.db.execute(
            select(Purchase)
            .where(Purchase.item_id == item_id)
            .options(selectinload(Purchase.account))
            .execution_options(populate_existing=True)
            .order_by(Purchase.created_at.desc(), Purchase.id.desc())
        )
        return list(result.scalars().all())
