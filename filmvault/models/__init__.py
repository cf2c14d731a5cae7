"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Purchase is the only entity with foreign keys; both are ON DELETE RESTRICT

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from filmvault.models.account import Account  # noqa: F401
from filmvault.models.item import Item  # noqa: F401
from filmvault.models.purchase import Purchase  # noqa: F401
