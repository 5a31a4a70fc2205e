from __future__ import annotations

from collections.abc import Callable
import os
from pathlib import Path


class GlobalPath:
    def __init__(self, resolver: Callable[[], Path]) -> None:
        self._resolver = resolver

    @property
    def path(self) -> Path:
        return self._resolver()


_DEFAULT_SETTINGSYNC_HOME = Path.home() / ".settingsync"


def _get_settingsync_home() -> Path:
    if settingsync_home := os.getenv("SETTINGSYNC_HOME"):
        return Path(settingsync_home).expanduser().resolve()
    return _DEFAULT_SETTINGSYNC_HOME


def _get_config_file() -> Path:
    if config_file := os.getenv("SETTINGSYNC_CONFIG_FILE"):
        return Path(config_file).expanduser().resolve()
    return SETTINGSYNC_HOME.path / "config.toml"


SETTINGSYNC_HOME = GlobalPath(_get_settingsync_home)
CONFIG_FILE = GlobalPath(_get_config_file)
GLOBAL_ENV_FILE = GlobalPath(lambda: SETTINGSYNC_HOME.path / ".env")
SETTINGS_FILE = GlobalPath(lambda: SETTINGSYNC_HOME.path / "settings.json")
LOG_DIR = GlobalPath(lambda: SETTINGSYNC_HOME.path / "logs")
LOG_FILE = GlobalPath(lambda: LOG_DIR.path / "settingsync.log")
