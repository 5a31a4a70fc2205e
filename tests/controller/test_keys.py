from __future__ import annotations

import pytest

from settingsync.core.controller import (
    InvalidKeyError,
    meta_namespace_key,
    split_meta_namespace_key,
)
from settingsync.core.types import Setting


def test_builds_keys_from_namespace_and_name() -> None:
    assert meta_namespace_key(Setting(name="upgrade-checker", value="true")) == (
        "upgrade-checker"
    )
    assert (
        meta_namespace_key(
            Setting(name="upgrade-checker", value="true", namespace="longhorn-system")
        )
        == "longhorn-system/upgrade-checker"
    )


@pytest.mark.parametrize("obj", [object(), Setting(name="", value="x"), None])
def test_rejects_objects_without_a_name(obj: object) -> None:
    with pytest.raises(InvalidKeyError):
        meta_namespace_key(obj)


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("upgrade-checker", ("", "upgrade-checker")),
        ("longhorn-system/upgrade-checker", ("longhorn-system", "upgrade-checker")),
    ],
)
def test_splits_keys(key: str, expected: tuple[str, str]) -> None:
    assert split_meta_namespace_key(key) == expected


def test_rejects_keys_with_too_many_segments() -> None:
    with pytest.raises(InvalidKeyError):
        split_meta_namespace_key("a/b/c")
