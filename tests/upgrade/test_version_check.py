from __future__ import annotations

import pytest

from settingsync.core.upgrade import (
    CheckResponse,
    VersionDescriptor,
    VersionGatewayCause,
    VersionGatewayError,
    check_latest_version,
    get_upgrade_availability,
    select_latest_version,
)
from tests.upgrade.adapters.fake_version_gateway import FakeVersionGateway


def _response(*versions: tuple[str, list[str]]) -> CheckResponse:
    return CheckResponse.model_validate({
        "versions": [{"Name": name, "Tags": tags} for name, tags in versions]
    })


def test_selects_the_first_version_tagged_latest() -> None:
    response = _response(
        ("1.0.0", ["stable"]), ("1.1.0", ["latest"]), ("2.0.0", ["latest", "dev"])
    )

    assert select_latest_version(response) == "1.1.0"


def test_does_not_pick_the_highest_version() -> None:
    response = _response(("1.0.0", ["latest"]), ("9.9.9", ["stable"]))

    assert select_latest_version(response) == "1.0.0"


@pytest.mark.parametrize(
    "response",
    [
        _response(("1.0.0", ["stable"]), ("1.1.0", [])),
        _response(("", ["latest"]), ("1.2.0", ["latest"])),
        CheckResponse(),
        CheckResponse.model_validate({"versions": None}),
    ],
)
def test_fails_without_a_latest_tag(response: CheckResponse) -> None:
    with pytest.raises(VersionGatewayError) as excinfo:
        select_latest_version(response)

    assert excinfo.value.cause is VersionGatewayCause.NO_LATEST_TAG
    assert "cannot find latest version in response" in str(excinfo.value)


def test_sends_the_current_version() -> None:
    gateway = FakeVersionGateway(
        response=CheckResponse(versions=[VersionDescriptor(name="v2", tags={"latest"})])
    )

    assert check_latest_version(gateway, "v1") == "v2"
    assert gateway.requests[0].model_dump(by_alias=True) == {"longhornVersion": "v1"}


def test_propagates_gateway_errors() -> None:
    error = VersionGatewayError(cause=VersionGatewayCause.REQUEST_FAILED)
    gateway = FakeVersionGateway(error=error)

    with pytest.raises(VersionGatewayError) as excinfo:
        check_latest_version(gateway, "v1")

    assert excinfo.value is error
    assert str(error) == "Network error while checking for upgrades."


@pytest.mark.parametrize(
    ("current", "latest"),
    [("v1.4.0", "v1.5.0"), ("1.4.0", "1.4.1"), ("1.4.0", "1.5.0-rc1")],
)
def test_reports_an_available_upgrade(current: str, latest: str) -> None:
    availability = get_upgrade_availability(current, latest)

    assert availability is not None
    assert availability.latest_version == latest
    assert availability.current_version == current


@pytest.mark.parametrize(
    ("current", "latest"),
    [
        ("v1.5.0", "v1.5.0"),
        ("v1.6.0", "v1.5.0"),
        ("master", "v1.5.0"),
        ("v1.4.0", "not-a-version"),
    ],
)
def test_reports_nothing_when_no_upgrade_applies(current: str, latest: str) -> None:
    assert get_upgrade_availability(current, latest) is None
