"""Persistence Gateway — thin per-entity data access over an AsyncSession.

Invariants:
    - Repositories never commit; the calling service owns the transaction
    - Writes flush immediately so constraint violations surface at the call site
    - Missing rows on update/delete raise sqlalchemy.exc.NoResultFound

Design Decisions:
    - One repository per relation (accounts, items, purchases) for locality
"""

from filmvault.repositories.account_repository import AccountRepository  # noqa: F401
from filmvault.repositories.item_repository import ItemRepository  # noqa: F401
from filmvault.repositories.purchase_repository import PurchaseRepository  # noqa: F401
