from datetime import datetime, timezone

import pytest

from modelboard.artifacts.versioning import (
    check_slot_name,
    content_hash,
    new_version,
    parse_version_timestamp,
    resolve_version,
)
from modelboard.common.exceptions import NotFound

NOON = datetime(2024, 3, 5, 12, 0, 0, 250000, tzinfo=timezone.utc)


def test_version_id_is_timestamp_plus_short_hash():
    info = new_version(b"model bytes", clock=lambda: NOON)

    assert info.version == f"20240305T120000250000Z-{content_hash(b'model bytes')[:5]}"
    assert info.created_at == NOON
    assert info.size == len(b"model bytes")


def test_version_timestamp_round_trips():
    info = new_version(b"x", clock=lambda: NOON)

    assert parse_version_timestamp(info.version) == NOON


def test_same_instant_is_bumped_past_latest():
    first = new_version(b"a", clock=lambda: NOON)
    second = new_version(b"a", latest=first.version, clock=lambda: NOON)

    assert second.version > first.version
    assert (second.created_at - first.created_at).total_seconds() == pytest.approx(1e-6)


def test_clock_going_backwards_still_orders_after_latest():
    later = new_version(b"a", clock=lambda: NOON)
    earlier = datetime(2023, 1, 1, tzinfo=timezone.utc)

    info = new_version(b"b", latest=later.version, clock=lambda: earlier)

    assert info.version > later.version


def test_resolve_version_latest_and_explicit():
    versions = ["20240101T000000000000Z-aaaaa", "20240102T000000000000Z-bbbbb"]

    assert resolve_version("s", versions, None) == versions[-1]
    assert resolve_version("s", versions, versions[0]) == versions[0]
    with pytest.raises(NotFound):
        resolve_version("s", versions, "20240103T000000000000Z-ccccc")
    with pytest.raises(NotFound):
        resolve_version("s", [], None)


@pytest.mark.parametrize("name", ["cars_mpg", "model-v2", "team.model", "A1"])
def test_valid_slot_names(name):
    assert check_slot_name(name) == name


@pytest.mark.parametrize("name", ["", "../up", "a/b", ".hidden", "has space", None])
def test_invalid_slot_names(name):
    with pytest.raises(ValueError):
        check_slot_name(name)
