from __future__ import annotations

from collections.abc import Callable, Hashable
import threading
import time
from typing import Protocol

DEFAULT_BASE_DELAY_SECONDS = 0.005
DEFAULT_MAX_DELAY_SECONDS = 1000.0
DEFAULT_QPS = 10.0
DEFAULT_BURST = 100


class RateLimiter[T: Hashable](Protocol):
    def when(self, item: T) -> float: ...
    def forget(self, item: T) -> None: ...
    def num_requeues(self, item: T) -> int: ...


class ItemExponentialFailureRateLimiter[T: Hashable]:
    """Per-item exponential backoff: ``base_delay * 2**failures``, capped."""

    def __init__(
        self,
        base_delay: float = DEFAULT_BASE_DELAY_SECONDS,
        max_delay: float = DEFAULT_MAX_DELAY_SECONDS,
    ) -> None:
        if base_delay < 0 or max_delay < 0:
            raise ValueError("delays must not be negative")
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._failures: dict[T, int] = {}
        self._lock = threading.Lock()

    def when(self, item: T) -> float:
        with self._lock:
            exp = self._failures.get(item, 0)
            self._failures[item] = exp + 1

        # 2**exp overflows a float long before it matters
        if exp >= 64:
            return self._max_delay
        return min(self._base_delay * 2**exp, self._max_delay)

    def forget(self, item: T) -> None:
        with self._lock:
            self._failures.pop(item, None)

    def num_requeues(self, item: T) -> int:
        with self._lock:
            return self._failures.get(item, 0)


class BucketRateLimiter[T: Hashable]:
    """Token bucket shared by every item.

    ``when`` reserves one token and returns how long the caller has to wait
    for it, so the overall requeue rate stays under ``qps`` after the first
    ``burst`` items.
    """

    def __init__(
        self,
        qps: float = DEFAULT_QPS,
        burst: int = DEFAULT_BURST,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if qps <= 0:
            raise ValueError("qps must be positive")
        if burst < 1:
            raise ValueError("burst must be at least 1")
        self._qps = float(qps)
        self._burst = float(burst)
        self._clock = clock
        self._tokens = self._burst
        self._updated = clock()
        self._lock = threading.Lock()

    def when(self, item: T) -> float:
        with self._lock:
            now = self._clock()
            elapsed = now - self._updated
            if elapsed > 0:
                self._tokens = min(self._burst, self._tokens + elapsed * self._qps)
                self._updated = now
            self._tokens -= 1
            if self._tokens >= 0:
                return 0.0
            return -self._tokens / self._qps

    def forget(self, item: T) -> None:
        return

    def num_requeues(self, item: T) -> int:
        return 0


class MaxOfRateLimiter[T: Hashable]:
    """Combines limiters by taking the worst delay and the highest requeue count."""

    def __init__(self, *limiters: RateLimiter[T]) -> None:
        if not limiters:
            raise ValueError("at least one rate limiter is required")
        self._limiters = limiters

    def when(self, item: T) -> float:
        return max(limiter.when(item) for limiter in self._limiters)

    def forget(self, item: T) -> None:
        for limiter in self._limiters:
            limiter.forget(item)

    def num_requeues(self, item: T) -> int:
        return max(limiter.num_requeues(item) for limiter in self._limiters)


def default_controller_rate_limiter[T: Hashable](
    *,
    base_delay: float = DEFAULT_BASE_DELAY_SECONDS,
    max_delay: float = DEFAULT_MAX_DELAY_SECONDS,
    qps: float = DEFAULT_QPS,
    burst: int = DEFAULT_BURST,
) -> MaxOfRateLimiter[T]:
    return MaxOfRateLimiter(
        ItemExponentialFailureRateLimiter(base_delay, max_delay),
        BucketRateLimiter(qps, burst),
    )
