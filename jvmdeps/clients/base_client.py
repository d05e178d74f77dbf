"""Base class for rate-limited repository clients."""

from __future__ import annotations

import logging
import time
from typing import Callable, Generic, Optional, Tuple, Type, TypeVar

from jvmdeps.net.rate_limiter import RateLimiter

T = TypeVar("T")


class BaseClient(Generic[T]):
    """Provide rate-limited, retried and timed execution of requests."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        *,
        max_retries: int = 0,
        backoff_seconds: float = 0.0,
        sleep_fn: Optional[Callable[[float], None]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must not be negative.")
        self._rate_limiter = rate_limiter
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds
        self._sleep_fn = sleep_fn or time.sleep
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def _execute_with_rate_limit(
        self,
        operation: Callable[[], T],
        *,
        name: Optional[str] = None,
    ) -> T:
        """Run ``operation`` once a token is available and log its latency."""
        label = name or getattr(operation, "__name__", "<anonymous>")
        self._rate_limiter.acquire()

        started_at = time.perf_counter()
        try:
            return operation()
        finally:
            if self._logger.isEnabledFor(logging.DEBUG):
                self._logger.debug(
                    "Request %s completed in %.2f ms",
                    label,
                    (time.perf_counter() - started_at) * 1000.0,
                )

    def _execute_with_retries(
        self,
        operation: Callable[[], T],
        *,
        retry_on: Tuple[Type[BaseException], ...],
        name: Optional[str] = None,
    ) -> T:
        """Run ``operation`` under the rate limit, retrying ``retry_on``.

        Each retry waits ``attempt * backoff_seconds`` first. The last
        error is re-raised once ``max_retries`` retries are used up.
        """
        label = name or getattr(operation, "__name__", "<anonymous>")
        attempt = 0
        while True:
            try:
                return self._execute_with_rate_limit(operation, name=label)
            except retry_on as error:
                if attempt >= self._max_retries:
                    raise
                attempt += 1
                self._logger.info(
                    "Retrying %s (%d/%d) after error: %s",
                    label,
                    attempt,
                    self._max_retries,
                    error,
                )
                self._sleep_fn(attempt * self._backoff_seconds)
