from __future__ import annotations

import httpx
from pydantic import ValidationError

from settingsync.core.upgrade.ports.version_gateway import (
    CheckRequest,
    CheckResponse,
    VersionGateway,
    VersionGatewayCause,
    VersionGatewayError,
)

CHECK_UPGRADE_URL = "http://upgrade-responder.longhorn.rancher.io/v1/checkupgrade"


class HttpVersionGateway(VersionGateway):
    def __init__(
        self,
        url: str = CHECK_UPGRADE_URL,
        *,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._url = url
        self._client = client
        self._timeout = timeout

    def check_upgrade(self, request: CheckRequest) -> CheckResponse:
        payload = request.model_dump(mode="json", by_alias=True)

        try:
            if self._client is not None:
                response = self._client.post(
                    self._url, json=payload, timeout=self._timeout
                )
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    response = client.post(self._url, json=payload)
        except httpx.RequestError as exc:
            raise VersionGatewayError(
                cause=VersionGatewayCause.REQUEST_FAILED,
                message=f"Network error while checking for upgrades: {exc}",
            ) from exc

        if response.is_error:
            raise VersionGatewayError(
                cause=VersionGatewayCause.ERROR_RESPONSE,
                message=f"Upgrade responder returned HTTP {response.status_code}.",
            )

        try:
            return CheckResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise VersionGatewayError(
                cause=VersionGatewayCause.INVALID_RESPONSE
            ) from exc
