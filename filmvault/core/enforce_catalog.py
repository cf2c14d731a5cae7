"""Catalog & Account Rules — pure normalization and validation of caller input.

Invariants:
    - Functions are PURE: return the normalized value or raise ValidationError
    - Email shape is local@domain.tld with no whitespace; stored lowercase
    - Names and titles are trimmed and must be non-empty afterwards
    - Prices are integers in the smallest currency unit and never negative

Design Decisions:
    - Regex shape check only, no deliverability lookup (ADR: email is a unique key, not a channel)
    - Shared by create and update paths so both enforce identical rules
"""

import re

from filmvault.core.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str) -> str:
    """Validate email shape and return its canonical (lowercase) form."""
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email.strip()):
        raise ValidationError("Invalid email format", field="email")
    return email.strip().lower()


def normalize_name(name: str | None, message: str = "Name is required") -> str:
    if not name or not name.strip():
        raise ValidationError(message, field="name")
    return name.strip()


def normalize_title(title: str | None) -> str:
    if not title or not title.strip():
        raise ValidationError("Title is required", field="title")
    return title.strip()


def check_price(price: int) -> int:
    if price < 0:
        raise ValidationError("Price cannot be negative", field="price")
    return price


def check_price_range(min_price: int, max_price: int) -> None:
    if min_price < 0 or max_price < 0:
        raise ValidationError("Price bounds cannot be negative", field="min_price")
    if min_price > max_price:
        raise ValidationError(
            "min_price must be less than or equal to max_price",
            field="min_price",
        )
