from __future__ import annotations

from settingsync.core.controller.errors import SyncError
from settingsync.core.controller.keys import (
    InvalidKeyError,
    meta_namespace_key,
    split_meta_namespace_key,
)
from settingsync.core.controller.reporting import ErrorReporter, LoggingErrorReporter
from settingsync.core.controller.setting_controller import (
    MAX_RETRIES,
    UPGRADE_CHECK_INTERVAL,
    ZERO_TIME,
    ControllerState,
    SettingController,
)

__all__ = [
    "MAX_RETRIES",
    "UPGRADE_CHECK_INTERVAL",
    "ZERO_TIME",
    "ControllerState",
    "ErrorReporter",
    "InvalidKeyError",
    "LoggingErrorReporter",
    "SettingController",
    "SyncError",
    "meta_namespace_key",
    "split_meta_namespace_key",
]
