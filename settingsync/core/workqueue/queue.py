from __future__ import annotations

from collections.abc import Hashable
import logging
import threading
import time

logger = logging.getLogger(__name__)


class WorkQueue[T: Hashable]:
    """Deduplicating FIFO queue that hands each item to one consumer at a time.

    An item lives in at most one of three sets:

    - pending: waiting to be handed out by ``get``, in insertion order
    - processing: handed out and not yet marked ``done``
    - dirty: added again while processing, re-queued by ``done``

    Adding an item that is already pending is a no-op, and an item is never
    handed to two consumers without an intervening ``done``.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        # dict keeps insertion order, so it doubles as an ordered set
        self._pending: dict[T, None] = {}
        self._processing: set[T] = set()
        self._dirty: set[T] = set()
        self._lock = threading.Lock()
        self._cond = threading.Condition(self._lock)
        self._drained = threading.Condition(self._lock)
        self._shutting_down = False

    def add(self, item: T) -> None:
        with self._lock:
            if self._shutting_down:
                logger.debug("Queue %r is shutting down, ignoring %r", self.name, item)
                return
            if item in self._processing:
                self._dirty.add(item)
                return
            if item in self._pending:
                return
            self._pending[item] = None
            self._cond.notify()

    def get(self) -> tuple[T | None, bool]:
        """Block until an item is available.

        Returns ``(item, False)``, or ``(None, True)`` once the queue has been
        shut down and every pending item was handed out.
        """
        with self._lock:
            while not self._pending and not self._shutting_down:
                self._cond.wait()
            if not self._pending:
                return None, True

            item = next(iter(self._pending))
            del self._pending[item]
            self._processing.add(item)
            return item, False

    def done(self, item: T) -> None:
        with self._lock:
            self._processing.discard(item)
            if item in self._dirty:
                self._dirty.discard(item)
                self._pending[item] = None
                self._cond.notify()
            elif not self._pending and not self._processing:
                self._drained.notify_all()

    def shut_down(self) -> None:
        with self._lock:
            self._shutting_down = True
            self._cond.notify_all()
            if not self._pending and not self._processing:
                self._drained.notify_all()
        logger.debug("Queue %r shut down", self.name)

    def shut_down_with_drain(self, timeout: float | None = None) -> bool:
        """Shut down, then wait until pending and in-flight items are finished.

        Returns False if ``timeout`` elapsed first.
        """
        self.shut_down()
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._lock:
            while self._pending or self._processing:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                self._drained.wait(remaining)
        return True

    @property
    def shutting_down(self) -> bool:
        with self._lock:
            return self._shutting_down

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
