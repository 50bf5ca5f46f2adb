"""Tests for accessory identity derivation."""

from __future__ import annotations

import itertools
import uuid

import pytest

from custom_components.tinxy.errors import InvalidIdentityInput
from custom_components.tinxy.identity import resolve_identity


def test_identity_is_deterministic() -> None:
    """The same inputs always resolve to the same identity."""

    first = resolve_identity("6134a1b2c3d4e5f601234567", 3, 1)
    second = resolve_identity("6134a1b2c3d4e5f601234567", 3, 1)

    assert first == second
    assert uuid.UUID(first).version == 5


def test_single_unit_identity_ignores_index() -> None:
    """Single-unit devices derive their identity from the device id alone."""

    assert resolve_identity("device-a", 1, 0) == resolve_identity("device-a", 0)


def test_identities_do_not_collide_across_sample() -> None:
    """Distinct device/unit pairs never produce the same identity."""

    device_ids = [f"dev{n}" for n in range(25)] + ["dev1-0", "dev1-1", "dev10"]
    identities: dict[str, tuple[str, int | None]] = {}
    for device_id in device_ids:
        single = resolve_identity(device_id, 1)
        assert single not in identities
        identities[single] = (device_id, None)
        for index in range(4):
            multi = resolve_identity(device_id, 4, index)
            assert multi not in identities, (device_id, index, identities.get(multi))
            identities[multi] = (device_id, index)

    assert len(identities) == len(device_ids) * 5


def test_multi_unit_identities_differ_per_index() -> None:
    """Every unit of a multi-switch device gets its own identity."""

    identities = {resolve_identity("board", 3, index) for index in range(3)}

    assert len(identities) == 3
    assert resolve_identity("board", 1) not in identities


@pytest.mark.parametrize(
    ("device_id", "index"),
    [("", 0), ("has#separator", 0), ("device", -1)],
)
def test_invalid_identity_input(device_id: str, index: int) -> None:
    """Empty ids, reserved characters and negative indexes are rejected."""

    with pytest.raises(InvalidIdentityInput):
        resolve_identity(device_id, 2, index)


def test_pairwise_distinct_for_small_grid() -> None:
    """Spot-check injectivity over a grid mixing single and multi-unit shapes."""

    values = [
        resolve_identity(device_id, count, index)
        for device_id, count in itertools.product(("a", "b", "ab"), (1, 2))
        for index in range(count)
    ]

    assert len(values) == len(set(values))
