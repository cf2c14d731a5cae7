"""Item Repository — catalog scans: newest first, text search, price range."""

from sqlalchemy import func, or_

from filmvault.core.pagination import Page, PageRequest
from filmvault.models.item import Item
from filmvault.repositories.base import BaseRepository


class ItemRepository(BaseRepository[Item]):
    model = Item

    async def search(self, query: str, page: PageRequest) -> Page[Item]:
        """Case-insensitive substring match on title or description."""
        pattern = f"%{query.lower()}%"
        return await self.find_page(
            page,
            or_(
                func.lower(Item.title).like(pattern),
                func.lower(Item.description).like(pattern),
            ),
        )

    async def find_by_price_range(
        self, min_price: int, max_price: int, page: PageRequest,
    ) -> Page[Item]:
        return await self.find_page(
            page,
            Item.price >= min_price,
            Item.price <= max_price,
            order_by=(Item.price.asc(), Item.created_at.desc(), Item.id.desc()),
        )
