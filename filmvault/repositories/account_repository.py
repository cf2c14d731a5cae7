"""Account Repository — lookups by id and (normalized) email."""

from sqlalchemy import select

from filmvault.models.account import Account
from filmvault.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    model = Account

    async def find_by_email(self, email: str) -> Account | None:
        """Exact match; callers pass the lowercase form."""
        result = await self.db.execute(
            select(Account).where(Account.email == email),
        )
        return result.scalar_one_or_none()
