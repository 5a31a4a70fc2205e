from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import tempfile
import threading

from settingsync.core.paths.global_paths import SETTINGS_FILE
from settingsync.core.settings.ports.setting_store import (
    SettingNotFoundError,
    SettingParseError,
    SettingStore,
    SettingStoreError,
)
from settingsync.core.types import SETTING_DEFINITIONS, Setting, get_setting_definition

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "t", "true"})
_FALSE_VALUES = frozenset({"0", "f", "false"})


class FileSystemSettingStore(SettingStore):
    """Settings kept as one JSON object ``{name: value}`` on disk.

    Names that were never written fall back to their definition default.
    Writes go through a temporary file so readers never see a partial file.
    """

    def __init__(self, path: Path | str | None = None, *, namespace: str = "") -> None:
        self._path = Path(path) if path is not None else SETTINGS_FILE.path
        self._namespace = namespace
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, name: str) -> Setting:
        with self._lock:
            values = self._read()

        if name in values:
            return Setting(name=name, value=values[name], namespace=self._namespace)
        if definition := get_setting_definition(name):
            return Setting(
                name=name, value=definition.default, namespace=self._namespace
            )
        raise SettingNotFoundError(name)

    def get_as_bool(self, name: str) -> bool:
        setting = self.get(name)
        match setting.value.strip().lower():
            case value if value in _TRUE_VALUES:
                return True
            case value if value in _FALSE_VALUES:
                return False
            case _:
                raise SettingParseError(name, setting.value, "boolean")

    def update(self, setting: Setting) -> Setting:
        with self._lock:
            values = self._read()
            values[setting.name] = setting.value
            self._write(values)
        logger.debug("Updated setting %s=%r", setting.name, setting.value)
        return Setting(
            name=setting.name, value=setting.value, namespace=self._namespace
        )

    def list_settings(self) -> list[Setting]:
        with self._lock:
            values = self._read()

        for name, definition in SETTING_DEFINITIONS.items():
            values.setdefault(str(name), definition.default)
        return [
            Setting(name=name, value=value, namespace=self._namespace)
            for name, value in sorted(values.items())
        ]

    def _read(self) -> dict[str, str]:
        try:
            content = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise SettingStoreError(f"cannot read {self._path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise SettingStoreError(f"{self._path} is not valid UTF-8") from exc

        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise SettingStoreError(f"{self._path} is not valid JSON") from exc

        if not isinstance(data, dict):
            raise SettingStoreError(f"{self._path} must contain a JSON object")
        for name, value in data.items():
            if not isinstance(value, str):
                raise SettingStoreError(
                    f"setting {name!r} in {self._path} must be a string, "
                    f"got {value!r}"
                )
        return data

    def _write(self, values: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(values, f, indent=2, sort_keys=True)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise SettingStoreError(f"cannot write {self._path}: {exc}") from exc
