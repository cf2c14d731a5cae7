"""Rate Admission — verifies fixed-window counting with an injected clock.

Tests:
    - admit, admit, reject within one window; admit again once it has elapsed
    - remaining never goes negative; keys are counted independently
    - the registry owns one counter per group and rejects unknown groups
"""

import threading

import pytest

from filmvault.core.rate_admission import (
    AdmissionPolicy, RateAdmissionCounter, RateAdmissionRegistry,
)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def counter(clock):
    return RateAdmissionCounter(
        AdmissionPolicy(window_seconds=1, max_requests=2, message="Too many"),
        clock=clock,
    )


def test_admits_up_to_max_then_rejects(counter):
    first = counter.admit("1.2.3.4")
    second = counter.admit("1.2.3.4")
    third = counter.admit("1.2.3.4")
    assert first.allowed and second.allowed
    assert not third.allowed
    assert third.message == "Too many"


def test_remaining_counts_down_and_never_negative(counter):
    assert counter.admit("k").remaining == 1
    assert counter.admit("k").remaining == 0
    assert counter.admit("k").remaining == 0
    assert counter.admit("k").remaining == 0


def test_window_resets_after_elapsing(counter, clock):
    for _ in range(3):
        counter.admit("k")
    clock.now += 1.5
    decision = counter.admit("k")
    assert decision.allowed
    assert decision.remaining == 1


def test_window_still_open_at_exact_reset_time(counter, clock):
    counter.admit("k")
    counter.admit("k")
    clock.now += 1
    assert not counter.admit("k").allowed


def test_keys_are_independent(counter):
    counter.admit("a")
    counter.admit("a")
    assert not counter.admit("a").allowed
    assert counter.admit("b").allowed


def test_decision_headers_and_retry_after(counter, clock):
    decision = counter.admit("k")
    assert decision.headers() == {
        "X-RateLimit-Limit": "2",
        "X-RateLimit-Remaining": "1",
        "X-RateLimit-Reset": str(int(clock.now + 1)),
    }
    assert decision.retry_after(clock.now) == 1
    assert decision.retry_after(clock.now + 5) == 0


def test_expired_windows_swept_when_key_cap_reached(clock):
    counter = RateAdmissionCounter(
        AdmissionPolicy(window_seconds=1, max_requests=5),
        clock=clock, max_keys=2,
    )
    counter.admit("a")
    counter.admit("b")
    clock.now += 2
    counter.admit("c")
    assert len(counter) == 1


def test_live_windows_capped_by_evicting_closest_to_expiry(clock):
    counter = RateAdmissionCounter(
        AdmissionPolicy(window_seconds=10, max_requests=1),
        clock=clock, max_keys=2,
    )
    counter.admit("a")
    clock.now += 1
    counter.admit("b")
    clock.now += 1
    counter.admit("c")
    assert len(counter) == 2
    # "a" was evicted, so it gets a fresh window; "c" is still exhausted
    assert counter.admit("a").allowed
    assert not counter.admit("c").allowed


def test_concurrent_admissions_never_exceed_max(clock):
    counter = RateAdmissionCounter(
        AdmissionPolicy(window_seconds=60, max_requests=50), clock=clock,
    )
    results = []
    lock = threading.Lock()

    def worker():
        for _ in range(20):
            decision = counter.admit("shared")
            with lock:
                results.append(decision.allowed)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 50


def test_registry_builds_one_counter_per_group(clock):
    registry = RateAdmissionRegistry(
        {
            "query": AdmissionPolicy(60, 50),
            "purchase": AdmissionPolicy(900, 10),
        },
        clock=clock,
    )
    assert registry.groups() == ["purchase", "query"]
    assert registry.counter("query").policy.max_requests == 50
    assert registry.counter("query") is not registry.counter("purchase")


def test_registry_rejects_unknown_group():
    registry = RateAdmissionRegistry({})
    with pytest.raises(KeyError, match="Unknown rate-limit group"):
        registry.counter("nope")


def test_registry_reset_clears_all_windows(clock):
    registry = RateAdmissionRegistry(
        {"query": AdmissionPolicy(60, 1)}, clock=clock,
    )
    registry.counter("query").admit("k")
    assert not registry.counter("query").admit("k").allowed
    registry.reset()
    assert registry.counter("query").admit("k").allowed
