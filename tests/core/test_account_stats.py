"""Account Stats — verifies pure aggregation of the purchase ledger."""

from datetime import datetime, timedelta, timezone

from filmvault.core.account_stats import compute_account_stats


def test_empty_ledger():
    stats = compute_account_stats([])
    assert stats.total_purchases == 0
    assert stats.total_spent == 0
    assert stats.first_purchase is None
    assert stats.last_purchase is None


def test_totals_and_bounds_regardless_of_input_order():
    t0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
    ledger = [
        (t0 + timedelta(days=2), 500),
        (t0, 1299),
        (t0 + timedelta(days=1), 0),
    ]
    stats = compute_account_stats(ledger)
    assert stats.total_purchases == 3
    assert stats.total_spent == 1799
    assert stats.first_purchase == t0
    assert stats.last_purchase == t0 + timedelta(days=2)
