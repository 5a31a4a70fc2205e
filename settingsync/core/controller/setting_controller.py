from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
import logging
import threading

from settingsync.core.controller.errors import SyncError
from settingsync.core.controller.keys import (
    InvalidKeyError,
    meta_namespace_key,
    split_meta_namespace_key,
)
from settingsync.core.controller.reporting import ErrorReporter, LoggingErrorReporter
from settingsync.core.settings.ports.setting_store import SettingStore
from settingsync.core.types import Setting, SettingName
from settingsync.core.upgrade import check
from settingsync.core.upgrade.ports.version_gateway import VersionGateway
from settingsync.core.utils import utc_now
from settingsync.core.workqueue import RateLimitingQueue

logger = logging.getLogger(__name__)

UPGRADE_CHECK_INTERVAL = timedelta(hours=24)
MAX_RETRIES = 3
QUEUE_NAME = "settingsync-setting"

ZERO_TIME = datetime.min.replace(tzinfo=UTC)


@dataclass(slots=True)
class ControllerState:
    last_upgrade_checked_at: datetime = ZERO_TIME


class SettingController:
    """Reconciles settings, and keeps the cached latest version up to date.

    Change notifications only enqueue keys; the worker threads started by
    ``run`` pull them from the queue, which guarantees a key is never synced
    by two workers at once. Failed keys are retried with backoff up to
    ``max_retries`` times, then dropped and reported.
    """

    def __init__(
        self,
        store: SettingStore,
        version: str,
        *,
        gateway: VersionGateway,
        queue: RateLimitingQueue[str] | None = None,
        reporter: ErrorReporter | None = None,
        upgrade_check_interval: timedelta = UPGRADE_CHECK_INTERVAL,
        max_retries: int = MAX_RETRIES,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._version = version
        self._gateway = gateway
        self._queue: RateLimitingQueue[str] = (
            queue if queue is not None else RateLimitingQueue(name=QUEUE_NAME)
        )
        self._reporter = reporter if reporter is not None else LoggingErrorReporter()
        self._upgrade_check_interval = upgrade_check_interval
        self._max_retries = max_retries
        self._clock = clock

        self.state = ControllerState()
        self._state_lock = threading.Lock()

    @property
    def queue(self) -> RateLimitingQueue[str]:
        return self._queue

    def on_add(self, setting: Setting) -> None:
        self.enqueue_setting(setting)

    def on_update(self, old: Setting, new: Setting) -> None:
        self.enqueue_setting(new)

    def on_delete(self, setting: Setting) -> None:
        self.enqueue_setting(setting)

    def enqueue_setting(self, setting: object) -> None:
        try:
            key = meta_namespace_key(setting)
        except InvalidKeyError as exc:
            self._reporter.report(exc)
            return
        self._queue.add(key)

    def run(self, stop_event: threading.Event, workers: int = 1) -> None:
        logger.info("Starting setting controller with %d worker(s)", workers)
        threads = [
            threading.Thread(target=self.worker, name=f"setting-worker-{i}")
            for i in range(max(1, workers))
        ]
        for thread in threads:
            thread.start()

        try:
            stop_event.wait()
        finally:
            self._queue.shut_down()
            for thread in threads:
                thread.join()
            logger.info("Shut down setting controller")

    def worker(self) -> None:
        while self.process_next_work_item():
            pass

    def process_next_work_item(self) -> bool:
        key, should_stop = self._queue.get()
        if should_stop or key is None:
            return False

        try:
            try:
                self.sync_setting(key)
            except Exception as exc:
                self.handle_err(exc, key)
            else:
                self.handle_err(None, key)
        finally:
            self._queue.done(key)
        return True

    def handle_err(self, err: BaseException | None, key: str) -> None:
        if err is None:
            self._queue.forget(key)
            return

        if self._queue.num_requeues(key) < self._max_retries:
            logger.warning("Error syncing setting %s: %s", key, err)
            self._queue.add_rate_limited(key)
            return

        self._reporter.report(err)
        logger.warning("Dropping setting %s out of the queue: %s", key, err)
        self._queue.forget(key)

    def sync_setting(self, key: str) -> None:
        try:
            _, name = split_meta_namespace_key(key)
            # only the upgrade checker needs reconciling
            if name != SettingName.UPGRADE_CHECKER:
                return
            with self._state_lock:
                self._sync_upgrade_checker()
        except Exception as exc:
            raise SyncError(key, exc) from exc

    def _sync_upgrade_checker(self) -> None:
        enabled = self._store.get_as_bool(SettingName.UPGRADE_CHECKER)
        latest = self._store.get(SettingName.LATEST_VERSION)

        if not enabled:
            if latest.value != "":
                latest.value = ""
                self._store.update(latest)
            # zero so that re-enabling checks right away
            self.state.last_upgrade_checked_at = ZERO_TIME
            return

        now = self._clock()
        if now < self.state.last_upgrade_checked_at + self._upgrade_check_interval:
            return

        old_version = latest.value
        latest.value = self.check_latest_version()
        self.state.last_upgrade_checked_at = now

        if latest.value != old_version:
            logger.info("New version %s is available", latest.value)
            self._store.update(latest)

    def check_latest_version(self) -> str:
        return check.check_latest_version(self._gateway, self._version)
