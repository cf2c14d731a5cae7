"""Repository Base — shared lookup, insert, update, delete and paginated scan.

Invariants:
    - paginate() returns the page and its total from one statement (COUNT(*) OVER ()),
      so both come from the same snapshot
    - update()/delete() raise NoResultFound when the row does not exist

Design Decisions:
    - Window-function count over a separate COUNT query: no total drift between
      the two reads under concurrent inserts (ADR: no REPEATABLE READ on SQLite)
    - A fallback COUNT runs only when the requested page is past the end
"""

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, delete as sql_delete, func, select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.ext.asyncio import AsyncSession

from filmvault.core.pagination import Page, PageRequest
from filmvault.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


async def paginate_select(
    db: AsyncSession, query: Select, page: PageRequest,
) -> tuple[list[Any], int]:
    """Run query for one page; return (rows, total) from a single snapshot."""
    windowed = (
        query.add_columns(func.count().over().label("_total"))
        .limit(page.page_size)
        .offset(page.offset)
    )
    result = await db.execute(windowed)
    rows = result.all()
    if rows:
        return [row[0] for row in rows], rows[0][-1]

    count_query = select(func.count()).select_from(
        query.order_by(None).subquery(),
    )
    total = (await db.execute(count_query)).scalar_one()
    return [], total


class BaseRepository(Generic[ModelT]):
    """Generic data access for a single mapped class."""

    model: type[ModelT]

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, entity_id: str) -> ModelT | None:
        return await self.db.get(self.model, entity_id)

    async def create(self, **values: Any) -> ModelT:
        entity = self.model(**values)
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def update(self, entity_id: str, values: dict[str, Any]) -> ModelT:
        entity = await self.find_by_id(entity_id)
        if entity is None:
            raise NoResultFound(
                f"No {self.model.__tablename__} row with id {entity_id!r} to update",
            )
        for key, value in values.items():
            setattr(entity, key, value)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def delete(self, entity_id: str) -> None:
        result = await self.db.execute(
            sql_delete(self.model).where(self.model.id == entity_id),
        )
        if result.rowcount == 0:
            raise NoResultFound(
                f"No {self.model.__tablename__} row with id {entity_id!r} to delete",
            )

    async def count(self, *criteria: Any) -> int:
        query = select(func.count()).select_from(self.model)
        if criteria:
            query = query.where(*criteria)
        return (await self.db.execute(query)).scalar_one()

    async def find_page(
        self, page: PageRequest, *criteria: Any, order_by: Sequence[Any] = (),
    ) -> Page[ModelT]:
        query = select(self.model)
        if criteria:
            query = query.where(*criteria)
        query = query.order_by(
            *(order_by or (self.model.created_at.desc(), self.model.id.desc())),
        )
        rows, total = await paginate_select(self.db, query, page)
        return Page(
            items=rows, total=total, page=page.page, page_size=page.page_size,
        )
