from __future__ import annotations

from collections.abc import Callable
import logging
import threading
import time
from typing import Protocol

from settingsync.core.settings.ports.setting_store import SettingStore, SettingStoreError
from settingsync.core.types import Setting

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 1.0
DEFAULT_RESYNC_PERIOD_SECONDS = 60 * 60


class SettingEventHandler(Protocol):
    def on_add(self, setting: Setting) -> None: ...
    def on_update(self, old: Setting, new: Setting) -> None: ...
    def on_delete(self, setting: Setting) -> None: ...


class SettingWatcher:
    """Turns a polled SettingStore into add/update/delete notifications.

    The first poll reports every setting as added. Every ``resync_period``
    seconds all known settings are re-delivered as updates, so a handler that
    missed or dropped one converges again.
    """

    def __init__(
        self,
        store: SettingStore,
        handler: SettingEventHandler,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        resync_period: float = DEFAULT_RESYNC_PERIOD_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._handler = handler
        self._poll_interval = poll_interval
        self._resync_period = resync_period
        self._clock = clock
        self._known: dict[str, Setting] = {}
        self._last_resync = clock()

    def run(self, stop_event: threading.Event) -> None:
        logger.info("Watching settings every %.1fs", self._poll_interval)
        while not stop_event.is_set():
            self.poll_once()
            stop_event.wait(self._poll_interval)
        logger.info("Stopped watching settings")

    def poll_once(self) -> None:
        try:
            current = {s.name: s for s in self._store.list_settings()}
        except SettingStoreError:
            logger.warning("Failed to list settings, will retry.", exc_info=True)
            return

        previous, self._known = self._known, current

        for name, setting in current.items():
            old = previous.get(name)
            if old is None:
                self._handler.on_add(setting)
            elif old.value != setting.value:
                self._handler.on_update(old, setting)

        for name, setting in previous.items():
            if name not in current:
                self._handler.on_delete(setting)

        now = self._clock()
        if now - self._last_resync >= self._resync_period:
            self._last_resync = now
            for setting in current.values():
                self._handler.on_update(setting, setting)
