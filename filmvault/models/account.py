"""Account ORM — a registered identity capable of purchasing items.

Invariants:
    - id is a string primary key: caller-supplied or a generated UUID4
    - email is unique and always stored lowercase (case-insensitive uniqueness)
    - name is non-nullable, trimmed by the service before persistence

Design Decisions:
    - String id over UUID column: accounts may be auto-provisioned from arbitrary caller ids
    - No purchases relationship: deletes go through the restrictive FK, never an ORM cascade
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from filmvault.db.base import Base


class Account(Base):
    """Account entity — purchaser of catalog items."""
    __tablename__ = "accounts"
    __table_args__ = (UniqueConstraint("email", name="accounts_email_key"),)

    id: Mapped[str] = mapped_column(
        String(255), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    email: Mapped[str] = mapped_column(
        String(320), nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
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
            "email": self.email,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
