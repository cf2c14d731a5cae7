"""Purchase ORM — immutable ledger entry linking one Account to one Item.

Invariants:
    - (account_id, item_id) is UNIQUE at the database level: at most one purchase per pair
    - Both foreign keys are ON DELETE RESTRICT: referenced rows cannot be deleted
    - No updated_at: purchases are never modified

Design Decisions:
    - Uniqueness enforced by constraint, not application code: closes the
      check-then-insert race between concurrent purchase requests
    - item relationship eager-loaded (selectin): every purchase response embeds its item
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from filmvault.db.base import Base


class Purchase(Base):
    """Purchase entity — one account bought one item."""
    __tablename__ = "purchases"
    __table_args__ = (
        UniqueConstraint(
            "account_id", "item_id", name="uq_purchases_account_id_item_id",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    account_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("accounts.id", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=False, index=True,
    )
    item_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("items.id", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(timezone.utc),
    )

    item: Mapped["Item"] = relationship("Item", lazy="selectin")
    account: Mapped["Account"] = relationship("Account", lazy="raise")

    def to_dict(self, include_item: bool = True) -> dict:
        data = {
            "id": self.id,
            "account_id": self.account_id,
            "item_id": self.item_id,
            "created_at": self.created_at.isoformat(),
        }
        if include_item:
            data["item"] = self.item.to_dict()
        return data
