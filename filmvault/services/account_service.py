"""Account Service — account lifecycle, purchase lookups and statistics.

Invariants:
    - Emails are validated by shape, stored lowercase and unique case-insensitively
    - Names are trimmed and never empty
    - Every per-account read checks the account exists first (NotFound otherwise)
    - An account with purchases cannot be deleted, mirroring the item guard

Design Decisions:
    - Email uniqueness pre-checked for a clean message; the unique index decides races
    - Deletion guarded in the service as well as by the restrictive FK, so both
      entity types reject with the same Conflict (ADR: one deletion policy)
    - get_account_stats sums CURRENT item prices (see core/account_stats.py)
"""

import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from filmvault.core.account_stats import AccountStats, compute_account_stats
from filmvault.core.domain_types import AccountChanges
from filmvault.core.enforce_catalog import normalize_email, normalize_name
from filmvault.core.errors import ConflictError, ErrorContext, NotFoundError
from filmvault.core.pagination import Page, PageRequest
from filmvault.infrastructure.error_taxonomy import (
    constraint_target, is_unique_violation,
)
from filmvault.models.account import Account
from filmvault.models.item import Item
from filmvault.models.purchase import Purchase
from filmvault.repositories import AccountRepository, PurchaseRepository

logger = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "Email already exists"


def _email_conflict(exc: IntegrityError) -> ConflictError:
    target = (constraint_target(exc) or "").lower()
    if target and "email" not in target:
        return ConflictError("Account already exists", code="ACCOUNT_EXISTS")
    return ConflictError(EMAIL_TAKEN_MESSAGE, code="EMAIL_TAKEN")


class AccountService:
    """Account operations for the accounts API."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.accounts = AccountRepository(db)
        self.purchases = PurchaseRepository(db)

    async def create_account(
        self, email: str, name: str, account_id: str | None = None,
    ) -> Account:
        email = normalize_email(email)
        name = normalize_name(name)

        if await self.accounts.find_by_email(email):
            raise ConflictError(EMAIL_TAKEN_MESSAGE, code="EMAIL_TAKEN")
        if account_id and await self.accounts.find_by_id(account_id):
            raise ConflictError("Account already exists", code="ACCOUNT_EXISTS")

        try:
            account = await self.accounts.create(
                id=account_id or str(uuid.uuid4()), email=email, name=name,
            )
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_unique_violation(e):
                raise _email_conflict(e) from e
            raise

        logger.info("Account created", extra={"account_id": account.id})
        return account

    async def get_account(self, account_id: str) -> Account:
        account = await self.accounts.find_by_id(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    async def get_account_by_email(self, email: str) -> Account:
        account = await self.accounts.find_by_email((email or "").strip().lower())
        if account is None:
            raise NotFoundError("Account")
        return account

    async def list_accounts(self, page=None, page_size=None) -> Page[Account]:
        return await self.accounts.find_page(PageRequest.normalize(page, page_size))

    async def update_account(
        self, account_id: str, changes: AccountChanges,
    ) -> Account:
        """Apply only the fields present in changes, re-validating each."""
        await self.get_account(account_id)

        values = changes.present()
        if "email" in values:
            values["email"] = normalize_email(values["email"])
            existing = await self.accounts.find_by_email(values["email"])
            if existing is not None and existing.id != account_id:
                raise ConflictError(EMAIL_TAKEN_MESSAGE, code="EMAIL_TAKEN")
        if "name" in values:
            values["name"] = normalize_name(values["name"], "Name cannot be empty")

        try:
            account = await self.accounts.update(account_id, values)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_unique_violation(e):
                raise _email_conflict(e) from e
            raise
        return account

    async def delete_account(self, account_id: str) -> None:
        await self.get_account(account_id)

        if await self.purchases.count_for_account(account_id) > 0:
            raise ConflictError(
                "Cannot delete account with existing purchases",
                code="ACCOUNT_HAS_PURCHASES",
                context=ErrorContext(account_id=account_id),
            )

        await self.accounts.delete(account_id)
        await self.db.commit()
        logger.info("Account deleted", extra={"account_id": account_id})

    async def get_purchased_items(
        self, account_id: str, page=None, page_size=None,
    ) -> Page[Item]:
        await self.get_account(account_id)
        return await self.purchases.purchased_items_page(
            account_id, PageRequest.normalize(page, page_size),
        )

    async def has_purchased(self, account_id: str, item_id: str) -> bool:
        await self.get_account(account_id)
        return await self.purchases.has_purchased(account_id, item_id)

    async def get_account_stats(self, account_id: str) -> AccountStats:
        """Totals over the account's purchases.

        total_spent uses each item's price as it is now, not the price paid:
        purchases store no price snapshot, so repricing an item changes the
        total for every past buyer.
        """
        await self.get_account(account_id)
        ledger = await self.purchases.ledger_for_account(account_id)
        return compute_account_stats(ledger)

    async def get_purchase_history(self, account_id: str) -> list[Purchase]:
        await self.get_account(account_id)
        return await self.purchases.history_for_account(account_id)
