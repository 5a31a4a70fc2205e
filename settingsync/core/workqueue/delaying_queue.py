from __future__ import annotations

from collections.abc import Callable, Hashable
import heapq
import itertools
import logging
import threading
import time

from settingsync.core.workqueue.queue import WorkQueue

logger = logging.getLogger(__name__)


class DelayingQueue[T: Hashable](WorkQueue[T]):
    """WorkQueue that can hold items back for a while before adding them.

    Delayed items wait in a min-heap serviced by a single daemon thread. An
    item that is already waiting keeps the earlier of its ready times, and
    waiting items are discarded on shutdown.
    """

    def __init__(
        self, name: str = "", *, clock: Callable[[], float] = time.monotonic
    ) -> None:
        super().__init__(name)
        self._clock = clock
        self._waiting: list[tuple[float, int, T]] = []
        self._ready_at: dict[T, float] = {}
        self._sequence = itertools.count()
        self._waiting_cond = threading.Condition()
        self._stopped = False
        self._waiting_thread = threading.Thread(
            target=self._waiting_loop,
            name=f"{name or 'workqueue'}-delay",
            daemon=True,
        )
        self._waiting_thread.start()

    def add_after(self, item: T, delay: float) -> None:
        if self.shutting_down:
            return
        if delay <= 0:
            self.add(item)
            return

        ready_at = self._clock() + delay
        with self._waiting_cond:
            current = self._ready_at.get(item)
            if current is not None and current <= ready_at:
                return
            self._ready_at[item] = ready_at
            heapq.heappush(self._waiting, (ready_at, next(self._sequence), item))
            self._waiting_cond.notify()

    def shut_down(self) -> None:
        super().shut_down()
        with self._waiting_cond:
            self._stopped = True
            if self._waiting:
                logger.debug(
                    "Queue %r dropping %d delayed items", self.name, len(self._ready_at)
                )
            self._waiting.clear()
            self._ready_at.clear()
            self._waiting_cond.notify_all()

    @property
    def waiting(self) -> int:
        with self._waiting_cond:
            return len(self._ready_at)

    def _waiting_loop(self) -> None:
        while True:
            with self._waiting_cond:
                if self._stopped:
                    return
                ready = self._pop_ready()
                if not ready:
                    timeout = (
                        self._waiting[0][0] - self._clock() if self._waiting else None
                    )
                    self._waiting_cond.wait(timeout)
                    continue

            for item in ready:
                self.add(item)

    def _pop_ready(self) -> list[T]:
        now = self._clock()
        ready: list[T] = []
        while self._waiting and self._waiting[0][0] <= now:
            ready_at, _, item = heapq.heappop(self._waiting)
            # superseded by an earlier add_after for the same item
            if self._ready_at.get(item) != ready_at:
                continue
            del self._ready_at[item]
            ready.append(item)
        return ready
