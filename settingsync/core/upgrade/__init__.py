from __future__ import annotations

from settingsync.core.upgrade.adapters.http_version_gateway import (
    CHECK_UPGRADE_URL,
    HttpVersionGateway,
)
from settingsync.core.upgrade.check import (
    VERSION_TAG_LATEST,
    UpgradeAvailability,
    check_latest_version,
    get_upgrade_availability,
    select_latest_version,
)
from settingsync.core.upgrade.ports.version_gateway import (
    DEFAULT_GATEWAY_MESSAGES,
    CheckRequest,
    CheckResponse,
    VersionDescriptor,
    VersionGateway,
    VersionGatewayCause,
    VersionGatewayError,
)

__all__ = [
    "CHECK_UPGRADE_URL",
    "DEFAULT_GATEWAY_MESSAGES",
    "VERSION_TAG_LATEST",
    "CheckRequest",
    "CheckResponse",
    "HttpVersionGateway",
    "UpgradeAvailability",
    "VersionDescriptor",
    "VersionGateway",
    "VersionGatewayCause",
    "VersionGatewayError",
    "check_latest_version",
    "get_upgrade_availability",
    "select_latest_version",
]
