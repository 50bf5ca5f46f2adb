"""Map Tinxy device type tags onto Home Assistant capability kinds."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

_FAN_TYPES = frozenset({"Fan"})
_LIGHT_TYPES = frozenset({"Light", "Bulb", "LED Bulb"})
_OUTLET_TYPES = frozenset({"Socket"})


class CapabilityKind(StrEnum):
    """Accessory shape exposed for a unit."""

    FAN = "fan"
    LIGHT = "light"
    OUTLET = "outlet"
    SWITCH = "switch"

    @property
    def platform(self) -> str:
        """Return the Home Assistant platform serving this kind."""

        if self is CapabilityKind.OUTLET:
            return "switch"
        return self.value

    @property
    def uses_active_state(self) -> bool:
        """Return True when the primary characteristic is Active, not On."""

        return self is CapabilityKind.FAN


# Evaluated in order; the first matching rule wins.
_PRECEDENCE: tuple[tuple[frozenset[str], CapabilityKind], ...] = (
    (_FAN_TYPES, CapabilityKind.FAN),
    (_LIGHT_TYPES, CapabilityKind.LIGHT),
    (_OUTLET_TYPES, CapabilityKind.OUTLET),
)


def classify(device_types: Iterable[str]) -> CapabilityKind:
    """Return the capability kind for a device's type tags."""

    tags = set(device_types or ())
    for matches, kind in _PRECEDENCE:
        if tags & matches:
            return kind
    return CapabilityKind.SWITCH
