from __future__ import annotations

from settingsync.core.settings.adapters.filesystem_setting_store import (
    FileSystemSettingStore,
)
from settingsync.core.settings.ports.setting_store import (
    SettingNotFoundError,
    SettingParseError,
    SettingStore,
    SettingStoreError,
)
from settingsync.core.settings.watcher import SettingEventHandler, SettingWatcher

__all__ = [
    "FileSystemSettingStore",
    "SettingEventHandler",
    "SettingNotFoundError",
    "SettingParseError",
    "SettingStore",
    "SettingStoreError",
    "SettingWatcher",
]
