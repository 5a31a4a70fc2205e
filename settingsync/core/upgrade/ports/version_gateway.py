from __future__ import annotations

from enum import StrEnum, auto
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VersionDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(alias="Name")
    release_date: str = Field(default="", alias="ReleaseDate")
    tags: frozenset[str] = Field(default=frozenset(), alias="Tags")

    @field_validator("release_date", mode="before")
    @classmethod
    def _null_release_date(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, value: object) -> object:
        return () if value is None else value


class CheckRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_version: str = Field(alias="longhornVersion")


class CheckResponse(BaseModel):
    versions: list[VersionDescriptor] = Field(default_factory=list)

    @field_validator("versions", mode="before")
    @classmethod
    def _null_versions(cls, value: object) -> object:
        return [] if value is None else value


class VersionGatewayCause(StrEnum):
    @staticmethod
    def _generate_next_value_(
        name: str, start: int, count: int, last_values: list[str]
    ) -> str:
        return name.lower()

    REQUEST_FAILED = auto()
    ERROR_RESPONSE = auto()
    INVALID_RESPONSE = auto()
    NO_LATEST_TAG = auto()
    UNKNOWN = auto()


DEFAULT_GATEWAY_MESSAGES: dict[VersionGatewayCause, str] = {
    VersionGatewayCause.REQUEST_FAILED: "Network error while checking for upgrades.",
    VersionGatewayCause.ERROR_RESPONSE: "Unexpected response received while checking for upgrades.",
    VersionGatewayCause.INVALID_RESPONSE: "Received an invalid response while checking for upgrades.",
    VersionGatewayCause.NO_LATEST_TAG: "No version tagged as latest in the upgrade response.",
    VersionGatewayCause.UNKNOWN: "Unable to determine the latest version.",
}


class VersionGatewayError(Exception):
    def __init__(
        self, *, cause: VersionGatewayCause, message: str | None = None
    ) -> None:
        self.cause = cause
        self.user_message = message
        detail = message or DEFAULT_GATEWAY_MESSAGES.get(
            cause, DEFAULT_GATEWAY_MESSAGES[VersionGatewayCause.UNKNOWN]
        )
        super().__init__(detail)


class VersionGateway(Protocol):
    def check_upgrade(self, request: CheckRequest) -> CheckResponse: ...
