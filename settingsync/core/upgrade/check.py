from __future__ import annotations

from dataclasses import dataclass

from packaging.version import InvalidVersion, Version

from settingsync.core.upgrade.ports.version_gateway import (
    CheckRequest,
    CheckResponse,
    VersionGateway,
    VersionGatewayCause,
    VersionGatewayError,
)

VERSION_TAG_LATEST = "latest"


@dataclass(frozen=True, slots=True)
class UpgradeAvailability:
    current_version: str
    latest_version: str


def select_latest_version(response: CheckResponse) -> str:
    """Return the first version tagged ``latest``, in response order.

    A nameless first match counts as no match.
    """
    for version in response.versions:
        if VERSION_TAG_LATEST in version.tags:
            if version.name:
                return version.name
            break

    raise VersionGatewayError(
        cause=VersionGatewayCause.NO_LATEST_TAG,
        message=f"cannot find latest version in response: {response.model_dump()}",
    )


def check_latest_version(gateway: VersionGateway, current_version: str) -> str:
    response = gateway.check_upgrade(CheckRequest(current_version=current_version))
    return select_latest_version(response)


def _parse_version(raw: str) -> Version | None:
    try:
        return Version(raw.lstrip("vV").replace("-", "+"))
    except InvalidVersion:
        return None


def get_upgrade_availability(
    current_version: str, latest_version: str
) -> UpgradeAvailability | None:
    if not (current := _parse_version(current_version)):
        return None
    if not (latest := _parse_version(latest_version)):
        return None
    if latest <= current:
        return None
    return UpgradeAvailability(
        current_version=current_version, latest_version=latest_version
    )
