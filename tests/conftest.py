from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest
import tomli_w


def get_base_config() -> dict[str, Any]:
    return {
        "current_version": "v1.4.0",
        "workers": 1,
        "queue": {"max_retries": 3},
        "upgrade_check": {
            "url": "http://upgrade-responder.test/v1/checkupgrade",
            "request_timeout_seconds": 5.0,
        },
    }


@pytest.fixture(autouse=True)
def _clear_settingsync_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("SETTINGSYNC_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def config_dir(
    _clear_settingsync_env: None,
    monkeypatch: pytest.MonkeyPatch,
    tmp_path_factory: pytest.TempPathFactory,
) -> Path:
    config_dir = tmp_path_factory.mktemp("settingsync")
    config_file = config_dir / "config.toml"
    config_file.write_text(tomli_w.dumps(get_base_config()), encoding="utf-8")

    monkeypatch.setenv("SETTINGSYNC_HOME", str(config_dir))
    return config_dir
