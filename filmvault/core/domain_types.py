"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - AccountId, ItemId, PurchaseId wrap str; never pass bare ids through domain logic
    - UNSET marks a field absent from a partial update; None and "" are real values
    - ItemChanges / AccountChanges only report fields that were explicitly supplied

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - Sentinel enum over Optional: partial updates must distinguish "absent" from "set to empty"
      (ADR: loosely-typed update payloads hid that difference)
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Literal, NewType


# ─── Identity Types ──────────────────────────────────────────────

AccountId = NewType("AccountId", str)
ItemId = NewType("ItemId", str)
PurchaseId = NewType("PurchaseId", str)


# ─── Partial Updates ─────────────────────────────────────────────

class _Unset(Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset.UNSET
Unset = Literal[_Unset.UNSET]


def _present_fields(changes: Any) -> dict[str, Any]:
    return {
        f.name: getattr(changes, f.name)
        for f in fields(changes)
        if getattr(changes, f.name) is not UNSET
    }


@dataclass(frozen=True)
class ItemChanges:
    """Partial update for an Item. Omitted fields stay UNSET and are left untouched."""
    title: str | Unset = UNSET
    description: str | Unset = UNSET
    price: int | Unset = UNSET
    content_url: str | Unset = UNSET

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "ItemChanges":
        return cls(**{k: v for k, v in data.items() if k in _ITEM_FIELDS})

    def present(self) -> dict[str, Any]:
        return _present_fields(self)


@dataclass(frozen=True)
class AccountChanges:
    """Partial update for an Account. Omitted fields stay UNSET and are left untouched."""
    email: str | Unset = UNSET
    name: str | Unset = UNSET

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "AccountChanges":
        return cls(**{k: v for k, v in data.items() if k in _ACCOUNT_FIELDS})

    def present(self) -> dict[str, Any]:
        return _present_fields(self)


_ITEM_FIELDS = {f.name for f in fields(ItemChanges)}
_ACCOUNT_FIELDS = {f.name for f in fields(AccountChanges)}
