"""Purchase Workflow — cross-entity orchestration for buying an item.

Invariants:
    - Steps run strictly in order: load item -> resolve account -> duplicate check -> insert
    - At most one Purchase per (account, item): the pre-check is advisory, the
      database unique constraint is the guard; a losing concurrent insert is a Conflict
    - Auto-provisioned accounts and their first purchase commit in one transaction

Design Decisions:
    - No in-process locking: requests may run on many workers, only the
      database sees all of them (ADR: constraint as correctness backstop)
    - Auto-provisioning is an explicit AutoProvisionPolicy fed from settings,
      so deployments can turn it off and require registration
    - A unique violation while provisioning means another request created the
      account first; the workflow re-reads it instead of failing
"""

import logging
import re
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from filmvault.core.errors import ConflictError, ErrorContext, NotFoundError
from filmvault.infrastructure.error_taxonomy import is_unique_violation
from filmvault.models.account import Account
from filmvault.models.purchase import Purchase
from filmvault.repositories import (
    AccountRepository, ItemRepository, PurchaseRepository,
)

logger = logging.getLogger(__name__)

ALREADY_PURCHASED_MESSAGE = "Item already purchased by this account"

_SAFE_LOCAL_ID = re.compile(r"[a-z0-9_-]{1,64}")
_PLACEHOLDER_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "filmvault:placeholder-account")
MAX_NAME_LENGTH = 255


def placeholder_token(account_id: str) -> str:
    """Email-safe token, distinct per account id.

    Short lowercase ids are used as-is. Anything else (uppercase, spaces, "@",
    long ids) becomes "x." plus a uuid5 of the id; the dot never appears in
    an as-is token, so the two forms cannot collide.
    """
    if _SAFE_LOCAL_ID.fullmatch(account_id):
        return account_id
    return "x." + uuid.uuid5(_PLACEHOLDER_NAMESPACE, account_id).hex


@dataclass(frozen=True)
class AutoProvisionPolicy:
    """Whether unknown purchasers get a placeholder account, and what it looks like."""
    enabled: bool = True
    email_template: str = "user-{account_id}@filmvault.local"
    name_template: str = "User {account_id}"

    def placeholder_email(self, account_id: str) -> str:
        token = placeholder_token(account_id)
        return self.email_template.format(account_id=token).strip().lower()

    def placeholder_name(self, account_id: str) -> str:
        name = self.name_template.format(account_id=account_id).strip()
        return name[:MAX_NAME_LENGTH]

    @classmethod
    def from_settings(cls, settings) -> "AutoProvisionPolicy":
        return cls(
            enabled=settings.purchase_auto_provision,
            email_template=settings.auto_provision_email_template,
            name_template=settings.auto_provision_name_template,
        )


class PurchaseWorkflow:
    """Records a purchase, provisioning the purchaser when policy allows."""

    def __init__(
        self, db: AsyncSession, policy: AutoProvisionPolicy | None = None,
    ):
        self.db = db
        self.policy = policy or AutoProvisionPolicy()
        self.accounts = AccountRepository(db)
        self.items = ItemRepository(db)
        self.purchases = PurchaseRepository(db)

    async def purchase(self, account_id: str, item_id: str) -> Purchase:
        """Buy item_id for account_id. Returns the Purchase with its Item attached."""
        item = await self.items.find_by_id(item_id)
        if item is None:
            raise NotFoundError("Item", item_id)

        account = await self._resolve_account(account_id)
        # Provisioning may have rolled back; reload so the item is not expired.
        item = await self.items.find_by_id(item_id)
        if item is None:
            raise NotFoundError("Item", item_id)

        ctx = ErrorContext(account_id=account.id, item_id=item_id)
        if await self.purchases.has_purchased(account.id, item_id):
            raise ConflictError(
                ALREADY_PURCHASED_MESSAGE, code="ALREADY_PURCHASED", context=ctx,
            )

        try:
            purchase = await self.purchases.create_purchase(account.id, item)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_unique_violation(e):
                logger.info(
                    "Concurrent duplicate purchase rejected by constraint",
                    extra={"account_id": account_id, "item_id": item_id},
                )
                raise ConflictError(
                    ALREADY_PURCHASED_MESSAGE, code="ALREADY_PURCHASED",
                    context=ctx,
                ) from e
            raise

        logger.info(
            "Purchase recorded",
            extra={"account_id": account.id, "item_id": item_id},
        )
        return purchase

    async def _resolve_account(self, account_id: str) -> Account:
        account = await self.accounts.find_by_id(account_id)
        if account is not None:
            return account
        if not self.policy.enabled:
            raise NotFoundError("Account", account_id)

        logger.info(
            "Account not found, provisioning placeholder",
            extra={"account_id": account_id},
        )
        try:
            return await self.accounts.create(
                id=account_id,
                email=self.policy.placeholder_email(account_id),
                name=self.policy.placeholder_name(account_id),
            )
        except IntegrityError as e:
            await self.db.rollback()
            if not is_unique_violation(e):
                raise
            account = await self.accounts.find_by_id(account_id)
            if account is None:
                raise ConflictError(
                    "Cannot provision account: placeholder email already registered",
                    code="PROVISION_CONFLICT",
                    context=ErrorContext(account_id=account_id),
                ) from e
            return account
