from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum, auto


class SettingName(StrEnum):
    UPGRADE_CHECKER = "upgrade-checker"
    LATEST_VERSION = "latest-longhorn-version"


class SettingType(StrEnum):
    @staticmethod
    def _generate_next_value_(
        name: str, start: int, count: int, last_values: list[str]
    ) -> str:
        return name.lower()

    BOOL = auto()
    STRING = auto()


@dataclass(slots=True)
class Setting:
    name: str
    value: str
    namespace: str = ""


@dataclass(frozen=True, slots=True)
class SettingDefinition:
    display_name: str
    description: str
    type: SettingType
    default: str
    read_only: bool = False


SETTING_DEFINITIONS: dict[SettingName, SettingDefinition] = {
    SettingName.UPGRADE_CHECKER: SettingDefinition(
        display_name="Enable Upgrade Checker",
        description="Periodically ask the upgrade responder whether a newer "
        "version has been released.",
        type=SettingType.BOOL,
        default="true",
    ),
    SettingName.LATEST_VERSION: SettingDefinition(
        display_name="Latest Version",
        description="The latest version reported by the upgrade responder. "
        "Updated by the upgrade checker.",
        type=SettingType.STRING,
        default="",
        read_only=True,
    ),
}


def get_setting_definition(name: str) -> SettingDefinition | None:
    try:
        return SETTING_DEFINITIONS[SettingName(name)]
    except ValueError:
        return None
