from __future__ import annotations

from collections.abc import MutableMapping
from datetime import timedelta
import io
import logging
import os
from pathlib import Path
import tomllib

from dotenv import dotenv_values
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
    TomlConfigSettingsSource,
)

from settingsync import __version__
from settingsync.core.controller.setting_controller import MAX_RETRIES
from settingsync.core.paths.global_paths import (
    CONFIG_FILE,
    GLOBAL_ENV_FILE,
    LOG_FILE,
    SETTINGS_FILE,
)
from settingsync.core.settings.watcher import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_RESYNC_PERIOD_SECONDS,
)
from settingsync.core.upgrade.adapters.http_version_gateway import CHECK_UPGRADE_URL
from settingsync.core.workqueue.rate_limiters import (
    DEFAULT_BASE_DELAY_SECONDS,
    DEFAULT_BURST,
    DEFAULT_MAX_DELAY_SECONDS,
    DEFAULT_QPS,
)

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    pass


class QueueConfig(BaseModel):
    max_retries: int = Field(default=MAX_RETRIES, ge=0)
    base_delay_seconds: float = Field(default=DEFAULT_BASE_DELAY_SECONDS, ge=0)
    max_delay_seconds: float = Field(default=DEFAULT_MAX_DELAY_SECONDS, ge=0)
    qps: float = Field(default=DEFAULT_QPS, gt=0)
    burst: int = Field(default=DEFAULT_BURST, ge=1)


class UpgradeCheckConfig(BaseModel):
    url: str = CHECK_UPGRADE_URL
    interval_seconds: float = Field(default=24 * 60 * 60, gt=0)
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    @property
    def interval(self) -> timedelta:
        return timedelta(seconds=self.interval_seconds)


class WatchConfig(BaseModel):
    poll_interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, gt=0)
    resync_period_seconds: float = Field(default=DEFAULT_RESYNC_PERIOD_SECONDS, gt=0)


class SettingSyncConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SETTINGSYNC_", env_nested_delimiter="__", extra="ignore"
    )

    current_version: str = __version__
    workers: int = Field(default=1, ge=1)
    settings_file: Path = Field(default_factory=lambda: SETTINGS_FILE.path)
    namespace: str = ""
    log_level: str = "INFO"
    log_file: Path = Field(default_factory=lambda: LOG_FILE.path)

    queue: QueueConfig = Field(default_factory=QueueConfig)
    upgrade_check: UpgradeCheckConfig = Field(default_factory=UpgradeCheckConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=CONFIG_FILE.path),
        )

    @classmethod
    def load(cls, **overrides: object) -> SettingSyncConfig:
        try:
            return cls(**overrides)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"{CONFIG_FILE.path} is not valid TOML: {exc}") from exc
        except (ValidationError, SettingsError) as exc:
            raise ConfigError(f"Invalid configuration:\n{exc}") from exc


def load_dotenv_values(
    env_path: Path | None = None,
    environ: MutableMapping[str, str] = os.environ,
) -> None:
    path = env_path if env_path is not None else GLOBAL_ENV_FILE.path
    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        return

    for key, value in dotenv_values(stream=io.StringIO(content)).items():
        if value:
            environ[key] = value
    logger.debug("Loaded environment from %s", path)
