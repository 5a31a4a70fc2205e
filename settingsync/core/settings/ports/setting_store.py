from __future__ import annotations

from typing import Protocol

from settingsync.core.types import Setting


class SettingStoreError(Exception):
    pass


class SettingNotFoundError(SettingStoreError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"setting {name!r} not found")


class SettingParseError(SettingStoreError):
    def __init__(self, name: str, value: str, expected: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"setting {name!r} has invalid {expected} value {value!r}")


class SettingStore(Protocol):
    def get(self, name: str) -> Setting: ...
    def get_as_bool(self, name: str) -> bool: ...
    def update(self, setting: Setting) -> Setting: ...
    def list_settings(self) -> list[Setting]: ...
