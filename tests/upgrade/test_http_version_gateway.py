from __future__ import annotations

from collections.abc import Callable
import json

import httpx
import pytest
import respx

from settingsync.core.upgrade import (
    CHECK_UPGRADE_URL,
    CheckRequest,
    HttpVersionGateway,
    VersionGatewayCause,
    VersionGatewayError,
    check_latest_version,
)

Handler = Callable[[httpx.Request], httpx.Response]

RESPONDER_URL = "http://upgrade-responder.test/v1/checkupgrade"


def _gateway(handler: Handler) -> HttpVersionGateway:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpVersionGateway(RESPONDER_URL, client=client)


def test_posts_the_current_version_and_decodes_the_versions() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert str(request.url) == RESPONDER_URL
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"longhornVersion": "v1.4.0"}
        return httpx.Response(
            status_code=httpx.codes.OK,
            json={
                "versions": [
                    {
                        "Name": "v1.5.0",
                        "ReleaseDate": "2023-07-14T00:00:00Z",
                        "Tags": ["latest"],
                    }
                ]
            },
        )

    response = _gateway(handler).check_upgrade(CheckRequest(current_version="v1.4.0"))

    assert len(response.versions) == 1
    version = response.versions[0]
    assert version.name == "v1.5.0"
    assert version.release_date == "2023-07-14T00:00:00Z"
    assert version.tags == frozenset({"latest"})


def test_selects_the_version_tagged_latest() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code=httpx.codes.OK,
            json={
                "versions": [
                    {"Name": "1.0.0", "ReleaseDate": "", "Tags": ["stable"]},
                    {"Name": "1.1.0", "ReleaseDate": "", "Tags": ["latest"]},
                ]
            },
        )

    assert check_latest_version(_gateway(handler), "1.0.0") == "1.1.0"


def test_accepts_null_fields_in_the_response() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code=httpx.codes.OK,
            json={"versions": [{"Name": "1.0.0", "ReleaseDate": None, "Tags": None}]},
        )

    response = _gateway(handler).check_upgrade(CheckRequest(current_version="1.0.0"))

    assert response.versions[0].tags == frozenset()
    assert response.versions[0].release_date == ""


def test_raises_when_the_request_fails() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("boom", request=request)

    with pytest.raises(VersionGatewayError) as excinfo:
        _gateway(handler).check_upgrade(CheckRequest(current_version="1.0.0"))

    assert excinfo.value.cause is VersionGatewayCause.REQUEST_FAILED
    assert isinstance(excinfo.value.__cause__, httpx.ConnectTimeout)


@pytest.mark.parametrize(
    "status_code",
    [httpx.codes.BAD_REQUEST, httpx.codes.NOT_FOUND, httpx.codes.SERVICE_UNAVAILABLE],
)
def test_raises_on_error_status(status_code: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=status_code, json={"versions": []})

    with pytest.raises(VersionGatewayError) as excinfo:
        _gateway(handler).check_upgrade(CheckRequest(current_version="1.0.0"))

    assert excinfo.value.cause is VersionGatewayCause.ERROR_RESPONSE
    assert str(int(status_code)) in str(excinfo.value)


@pytest.mark.parametrize(
    "content",
    [
        b"not json",
        b'{"versions": "nope"}',
        b'{"versions": [{"ReleaseDate": "2023-07-14"}]}',
        b"[]",
    ],
)
def test_raises_on_invalid_response(content: bytes) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=httpx.codes.OK, content=content)

    with pytest.raises(VersionGatewayError) as excinfo:
        _gateway(handler).check_upgrade(CheckRequest(current_version="1.0.0"))

    assert excinfo.value.cause is VersionGatewayCause.INVALID_RESPONSE


@respx.mock
def test_uses_its_own_client_when_none_is_given() -> None:
    route = respx.post(CHECK_UPGRADE_URL).mock(
        return_value=httpx.Response(
            status_code=httpx.codes.OK,
            json={"versions": [{"Name": "v1.6.0", "Tags": ["latest", "stable"]}]},
        )
    )

    latest_version = check_latest_version(HttpVersionGateway(), "v1.5.0")

    assert latest_version == "v1.6.0"
    assert route.call_count == 1
    assert json.loads(route.calls.last.request.content) == {
        "longhornVersion": "v1.5.0"
    }
