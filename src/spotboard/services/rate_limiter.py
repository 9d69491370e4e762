"""Weighted rate limiter for upstream API requests.

Hyperliquid budgets requests by weight rather than count: every IP gets
1200 weight per minute, and the info endpoints used here cost 20 each.
This limiter keeps all outbound calls of the process inside that budget,
caps the number of simultaneous requests, and retries calls rejected
with HTTP 429 using exponential backoff.

One instance is created per process and injected into every API client
that shares the upstream quota.

Example:
    ```python
    limiter = WeightedRateLimiter()
    data = await limiter.execute(lambda: client.post("/info", json=body), weight=20)
    ```
"""

import asyncio
import math
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
import structlog

from spotboard.core.exceptions import RateLimitExceededError

log = structlog.get_logger(__name__)

T = TypeVar("T")


def _is_rate_limited(error: BaseException) -> bool:
    """Return True if the error is an upstream 429 rejection."""
    if isinstance(error, RateLimitExceededError):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code == 429
    return False


class WeightedRateLimiter:
    """Weight budget, concurrency gate and 429 retry for upstream calls.

    The weight counter belongs to a fixed wall-clock window
    (``floor(now / interval)``) and resets when the window changes.
    Weight is reserved at admission, so concurrent callers cannot
    overspend the budget while their requests are still in flight.
    Consumed weight is never refunded, including for failed calls.

    Attributes:
        weight_budget: Weight allowed per window.
        interval_seconds: Window length in seconds.
        max_concurrency: Maximum operations running at once.
        max_retries: Retries after a 429 before giving up.
        base_delay_ms: Backoff base; retry ``n`` sleeps ``base * 2**n`` ms.
    """

    def __init__(
        self,
        weight_budget: int = 1200,
        interval_seconds: float = 60.0,
        max_concurrency: int = 5,
        max_retries: int = 5,
        base_delay_ms: int = 1000,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize rate limiter.

        Args:
            weight_budget: Weight allowed per window (default: 1200).
            interval_seconds: Window length in seconds (default: 60).
            max_concurrency: Simultaneous operations (default: 5).
            max_retries: Retries after HTTP 429 (default: 5).
            base_delay_ms: Backoff base delay in milliseconds (default: 1000).
            clock: Wall-clock source in seconds.
            sleep: Coroutine used for every wait.
        """
        if weight_budget < 1:
            raise ValueError("weight_budget must be positive")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.weight_budget = weight_budget
        self.interval_seconds = interval_seconds
        self.max_concurrency = max_concurrency
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms

        self._clock = clock
        self._sleep = sleep
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._window = self._current_window()
        self._window_weight = 0
        self._in_flight = 0
        self._budget_waits = 0

        log.info(
            "rate_limiter_initialized",
            weight_budget=weight_budget,
            interval_seconds=interval_seconds,
            max_concurrency=max_concurrency,
            max_retries=max_retries,
        )

    def _current_window(self) -> int:
        return math.floor(self._clock() / self.interval_seconds)

    def _roll_window(self) -> None:
        window = self._current_window()
        if window != self._window:
            self._window = window
            self._window_weight = 0

    def _seconds_until_next_window(self) -> float:
        return self.interval_seconds - (self._clock() % self.interval_seconds)

    async def _admit(self, weight: int) -> None:
        """Wait until the current window has room for ``weight``, then reserve it."""
        self._roll_window()
        while self._window_weight + weight > self.weight_budget:
            wait = self._seconds_until_next_window()
            self._budget_waits += 1
            log.info(
                "rate_limit_budget_wait",
                window_weight=self._window_weight,
                weight=weight,
                wait_seconds=round(wait, 3),
            )
            await self._sleep(wait)
            self._roll_window()

        # No await between the check above and this increment
        self._window_weight += weight

    async def execute(self, operation: Callable[[], Awaitable[T]], weight: int = 1) -> T:
        """Run ``operation`` within the weight budget and concurrency bound.

        Args:
            operation: Zero-argument callable returning a fresh awaitable.
                Called once per attempt.
            weight: Weight charged against the window for each attempt.

        Returns:
            The operation's result.

        Raises:
            ValueError: If weight exceeds the whole budget.
            RateLimitExceededError: If 429 retries are exhausted (or the
                operation's own 429 error type).
            Exception: Any non-429 error from the operation, unretried.
        """
        if weight > self.weight_budget:
            raise ValueError(
                f"Weight {weight} exceeds the budget of {self.weight_budget} per window"
            )

        attempt = 0
        while True:
            await self._admit(weight)
            try:
                async with self._semaphore:
                    self._in_flight += 1
                    try:
                        return await operation()
                    finally:
                        self._in_flight -= 1
            except Exception as e:
                if not _is_rate_limited(e) or attempt >= self.max_retries:
                    if _is_rate_limited(e):
                        log.error(
                            "rate_limit_retries_exhausted",
                            attempts=attempt + 1,
                            max_retries=self.max_retries,
                        )
                    raise

                delay_ms = self.base_delay_ms * 2**attempt
                log.warning(
                    "rate_limit_retry_backoff",
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    delay_ms=delay_ms,
                )
                await self._sleep(delay_ms / 1000)
                attempt += 1

    def stats(self) -> dict[str, Any]:
        """Get a snapshot of limiter state for health reporting."""
        self._roll_window()
        return {
            "window_weight": self._window_weight,
            "weight_budget": self.weight_budget,
            "in_flight": self._in_flight,
            "max_concurrency": self.max_concurrency,
            "budget_waits": self._budget_waits,
        }
