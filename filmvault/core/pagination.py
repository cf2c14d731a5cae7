"""Pagination — normalizes 1-indexed page requests and derives page counts.

Invariants:
    - page >= 1 and 1 <= page_size <= MAX_PAGE_SIZE after normalization
    - Missing, non-numeric, non-positive or oversized values fall back to the defaults
    - total_pages == ceil(total / page_size); 0 when total is 0

Design Decisions:
    - Lenient fallback instead of a 400: list endpoints never fail on bad paging input
"""

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_PAGE: int = 1
DEFAULT_PAGE_SIZE: int = 20
MAX_PAGE_SIZE: int = 100


def _positive_int(value: int | str | None) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


@dataclass(frozen=True)
class PageRequest:
    """A validated (page, page_size) pair."""
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @classmethod
    def normalize(
        cls,
        page: int | str | None = None,
        page_size: int | str | None = None,
        default_size: int = DEFAULT_PAGE_SIZE,
        max_size: int = MAX_PAGE_SIZE,
    ) -> "PageRequest":
        size = _positive_int(page_size)
        if size is None or size > max_size:
            size = default_size
        return cls(page=_positive_int(page) or DEFAULT_PAGE, page_size=size)


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if total else 0


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the totals needed to walk the rest."""
    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return total_pages(self.total, self.page_size)
