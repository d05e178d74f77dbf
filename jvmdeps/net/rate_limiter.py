"""
jvmdeps Repository
Introductory remarks: This module is part of the jvmdeps codebase.

Token-bucket rate limiter shared by the exploration workers' repository
requests.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Optional


class RateLimiter:
    """Enforce a maximum number of operations per time window.

    Every exploration worker funnels its repository requests through one
    limiter, so the bucket bounds the whole run rather than each thread.
    Each call to :meth:`acquire` consumes a single token; tokens refill at
    ``max_calls`` per ``period_seconds``.
    """

    def __init__(
        self,
        max_calls: int,
        period_seconds: float,
        *,
        time_fn: Optional[Callable[[], float]] = None,
        sleep_fn: Optional[Callable[[float], None]] = None,
    ) -> None:
        if max_calls <= 0:
            raise ValueError("max_calls must be positive.")
        if period_seconds <= 0:
            raise ValueError("period_seconds must be positive.")

        self._capacity = float(max_calls)
        self._seconds_per_token = float(period_seconds) / self._capacity
        self._time_fn = time_fn or time.monotonic
        self._sleep_fn = sleep_fn or time.sleep

        self._lock = threading.Lock()
        self._tokens = self._capacity
        self._updated_at = self._time_fn()
        self._waits = 0

    @classmethod
    def per_second(cls, requests_per_second: int) -> "RateLimiter":
        return cls(max_calls=requests_per_second, period_seconds=1.0)

    @property
    def waits(self) -> int:
        """How many times a caller had to sleep for a token."""
        return self._waits

    def acquire(self) -> None:
        """Block until a token is available."""
        while True:
            with self._lock:
                self._refill(self._time_fn())
                if self._tokens >= 1.0:
                    self._tokens -= 1.0
                    return
                wait_time = (1.0 - self._tokens) * self._seconds_per_token
                self._waits += 1

            # Sleep without the lock so other workers can refill and take.
            self._sleep_fn(wait_time)

    def _refill(self, now: float) -> None:
        elapsed = now - self._updated_at
        if elapsed <= 0:
            return
        self._tokens = min(
            self._capacity, self._tokens + elapsed / self._seconds_per_token
        )
        self._updated_at = now
