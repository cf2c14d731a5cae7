"""Account Stats — pure aggregation of an account's purchase ledger.

Invariants:
    - Input is (purchased_at, current_item_price) pairs; no IO, no DB
    - total_spent sums CURRENT item prices, not the price paid at purchase time
    - first/last_purchase are None when there are no purchases

Design Decisions:
    - Pure function, not a repository method: the aggregation is testable without a database
    - Current-price semantics kept on purpose: purchases carry no price snapshot, so a
      price change after purchase changes total_spent (ADR: documented, not silently fixed)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable


@dataclass(frozen=True)
class AccountStats:
    total_purchases: int
    total_spent: int
    first_purchase: datetime | None
    last_purchase: datetime | None


def compute_account_stats(
    purchases: Iterable[tuple[datetime, int]],
) -> AccountStats:
    """Aggregate purchase timestamps and current prices. Pure, no IO."""
    rows = sorted(purchases, key=lambda row: row[0])
    return AccountStats(
        total_purchases=len(rows),
        total_spent=sum(price for _, price in rows),
        first_purchase=rows[0][0] if rows else None,
        last_purchase=rows[-1][0] if rows else None,
    )
