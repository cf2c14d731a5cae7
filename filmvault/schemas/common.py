"""Response Envelopes — the JSON shapes every endpoint returns.

Invariants:
    - success is always present; data / message only when meaningful
    - Paginated bodies carry total, page, page_size and total_pages next to data
"""

from typing import Any, Callable, TypeVar

from filmvault.core.pagination import Page

T = TypeVar("T")


def envelope(data: Any = None, message: str | None = None) -> dict:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body


def page_envelope(page: Page[T], serialize: Callable[[T], dict]) -> dict:
    return {
        "success": True,
        "data": [serialize(entry) for entry in page.items],
        "total": page.total,
        "page": page.page,
        "page_size": page.page_size,
        "total_pages": page.total_pages,
    }
