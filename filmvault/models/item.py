"""Item ORM — a purchasable catalog entry (a film).

Invariants:
    - id is a generated UUID4 string
    - price is a non-negative integer in the smallest currency unit
    - content_url is stored as given; the request schema checks its format
    - registrant_id records who registered the item; it is not a foreign key

Design Decisions:
    - title indexed: search and listing filter on it
    - registrant_id as plain string: registrants are not required to hold an account
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, String, Text, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from filmvault.db.base import Base


class Item(Base):
    """Item entity — a film offered for purchase."""
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_items_price_non_negative"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    content_url: Mapped[str] = mapped_column(Text, nullable=False)
    registrant_id: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "content_url": self.content_url,
            "registrant_id": self.registrant_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
