from __future__ import annotations

from collections.abc import Callable, Hashable
import time

from settingsync.core.workqueue.delaying_queue import DelayingQueue
from settingsync.core.workqueue.rate_limiters import (
    RateLimiter,
    default_controller_rate_limiter,
)


class RateLimitingQueue[T: Hashable](DelayingQueue[T]):
    """DelayingQueue whose retry delays come from a RateLimiter."""

    def __init__(
        self,
        rate_limiter: RateLimiter[T] | None = None,
        name: str = "",
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(name, clock=clock)
        self._rate_limiter: RateLimiter[T] = (
            rate_limiter
            if rate_limiter is not None
            else default_controller_rate_limiter()
        )

    def add_rate_limited(self, item: T) -> None:
        self.add_after(item, self._rate_limiter.when(item))

    def forget(self, item: T) -> None:
        self._rate_limiter.forget(item)

    def num_requeues(self, item: T) -> int:
        return self._rate_limiter.num_requeues(item)
