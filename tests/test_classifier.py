"""Tests for capability classification."""

from __future__ import annotations

import pytest

from custom_components.tinxy.classifier import CapabilityKind, classify


@pytest.mark.parametrize(
    ("device_types", "expected"),
    [
        (["Fan", "Socket"], CapabilityKind.FAN),
        (["Socket", "Light"], CapabilityKind.LIGHT),
        (["LED Bulb"], CapabilityKind.LIGHT),
        (["Bulb"], CapabilityKind.LIGHT),
        (["Light", "Fan"], CapabilityKind.FAN),
        (["Socket"], CapabilityKind.OUTLET),
        (["Geyser"], CapabilityKind.SWITCH),
        ([], CapabilityKind.SWITCH),
        (None, CapabilityKind.SWITCH),
    ],
)
def test_classify_precedence(device_types, expected) -> None:
    """Fan beats Light beats Outlet; anything else is a Switch."""

    assert classify(device_types) is expected


def test_capability_platforms() -> None:
    """Outlets share the switch platform; fans use the Active characteristic."""

    assert CapabilityKind.OUTLET.platform == "switch"
    assert CapabilityKind.SWITCH.platform == "switch"
    assert CapabilityKind.LIGHT.platform == "light"
    assert CapabilityKind.FAN.platform == "fan"
    assert CapabilityKind.FAN.uses_active_state is True
    assert CapabilityKind.LIGHT.uses_active_state is False
