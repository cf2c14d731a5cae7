"""Rate Admission — fixed-window request counters keyed by caller identity.

Invariants:
    - A key's window starts on its first request; count resets once reset_at < now
    - Rejection iff the post-increment count exceeds max_requests
    - remaining == max(0, max_requests - count), never negative
    - Read-modify-write of the counter map happens under a single lock
    - The map never holds more than max_keys windows: expired ones go first, then
      the one closest to expiry

Design Decisions:
    - Counter is an owned object (one per policy group), never a module-level dict:
      create_app builds a RateAdmissionRegistry and injects it (ADR: no global state)
    - threading.Lock over asyncio.Lock: admit() never awaits, so it is safe from
      sync and async callers alike and under multi-threaded servers
    - Clock is injectable so window expiry is testable without sleeping
    - State lives only for the process lifetime; restarts reset every window
"""

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class AdmissionPolicy:
    """Window length, request budget and rejection message for one group."""
    window_seconds: float
    max_requests: int
    message: str = "Too many requests, please try again later."


@dataclass(frozen=True)
class AdmissionDecision:
    """Outcome of one admission check, including response metadata."""
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    message: str

    def retry_after(self, now: float) -> int:
        return max(0, math.ceil(self.reset_at - now))

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(self.reset_at)),
        }


@dataclass
class _Window:
    count: int
    reset_at: float


class RateAdmissionCounter:
    """Thread-safe fixed-window counter for a single policy."""

    def __init__(
        self,
        policy: AdmissionPolicy,
        clock: Callable[[], float] = time.time,
        max_keys: int = 10_000,
    ):
        self.policy = policy
        self._clock = clock
        self._max_keys = max_keys
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def admit(self, key: str) -> AdmissionDecision:
        """Count one request for key and decide whether it is admitted."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or window.reset_at < now:
                if window is None and len(self._windows) >= self._max_keys:
                    self._sweep(now)
                window = _Window(count=1, reset_at=now + self.policy.window_seconds)
                self._windows[key] = window
            else:
                window.count += 1
            count, reset_at = window.count, window.reset_at

        limit = self.policy.max_requests
        return AdmissionDecision(
            allowed=count <= limit,
            limit=limit,
            remaining=max(0, limit - count),
            reset_at=reset_at,
            message=self.policy.message,
        )

    def now(self) -> float:
        return self._clock()

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)

    def _sweep(self, now: float) -> None:
        """Drop expired windows, else the one closest to expiry. Caller holds the lock."""
        expired = [k for k, w in self._windows.items() if w.reset_at < now]
        for k in expired:
            del self._windows[k]
        if len(self._windows) >= self._max_keys:
            oldest = min(self._windows, key=lambda k: self._windows[k].reset_at)
            del self._windows[oldest]


class RateAdmissionRegistry:
    """One RateAdmissionCounter per named operation group."""

    def __init__(
        self,
        policies: dict[str, AdmissionPolicy],
        clock: Callable[[], float] = time.time,
        max_keys: int = 10_000,
    ):
        self._counters = {
            group: RateAdmissionCounter(policy, clock=clock, max_keys=max_keys)
            for group, policy in policies.items()
        }

    def counter(self, group: str) -> RateAdmissionCounter:
        try:
            return self._counters[group]
        except KeyError:
            raise KeyError(f"Unknown rate-limit group: {group}") from None

    def groups(self) -> list[str]:
        return sorted(self._counters)

    def reset(self) -> None:
        for counter in self._counters.values():
            counter.reset()
