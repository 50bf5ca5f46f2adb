"""Data structures shared by the Tinxy client, synchronizer and entities."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from .classifier import CapabilityKind
from .errors import InvalidIdentityInput

StateValue = bool | int
GetHandler = Callable[[], Awaitable[StateValue]]
SetHandler = Callable[[StateValue], Awaitable[None]]


class Active(IntEnum):
    """Fan activity values, mirroring the HomeKit Active characteristic."""

    INACTIVE = 0
    ACTIVE = 1


def _resolve_payload_value(
    payload: dict[str, Any],
    *keys: str,
    default: Any = None,
) -> Any:
    """Return the first non-``None`` value for ``keys`` in ``payload``."""

    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def _string_tuple(value: Any, field_name: str) -> tuple[str, ...]:
    """Normalise a list-ish payload field into a tuple of strings."""

    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list | tuple):
        raise InvalidIdentityInput(
            f"Device field {field_name} is not a list: {value!r}"
        )
    return tuple(str(item) for item in value if item is not None)


@dataclass(frozen=True, slots=True)
class Unit:
    """One independently addressable switch of a device."""

    device_id: str
    index: int
    name: str

    @property
    def device_number(self) -> int:
        """Return the 1-based number the API uses to address this unit."""

        return self.index + 1


@dataclass(frozen=True, slots=True)
class DeviceDescriptor:
    """Device entry as returned by the Tinxy device listing."""

    device_id: str
    name: str
    device_types: tuple[str, ...] = ()
    sub_switches: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> DeviceDescriptor:
        """Normalise a raw listing entry, rejecting entries without an id."""

        if not isinstance(payload, dict):
            raise InvalidIdentityInput(f"Device entry is not an object: {payload!r}")
        device_id = _resolve_payload_value(payload, "_id", "id", "deviceId")
        if not isinstance(device_id, str) or not device_id:
            raise InvalidIdentityInput("Device entry is missing its id")

        name = _resolve_payload_value(payload, "name", "deviceName", default=device_id)
        return cls(
            device_id=device_id,
            name=str(name),
            device_types=_string_tuple(
                _resolve_payload_value(payload, "deviceTypes", "device_types"),
                "deviceTypes",
            ),
            sub_switches=_string_tuple(
                _resolve_payload_value(payload, "devices", "subSwitches"),
                "devices",
            ),
        )

    @property
    def unit_count(self) -> int:
        """Return how many units the device exposes."""

        return max(1, len(self.sub_switches))

    def units(self) -> list[Unit]:
        """Expand the descriptor into its addressable units."""

        if not self.sub_switches:
            return [Unit(self.device_id, 0, self.name)]
        return [
            Unit(self.device_id, index, f"{self.name} - {switch_name}")
            for index, switch_name in enumerate(self.sub_switches)
        ]


@dataclass(slots=True)
class AccessoryRecord:
    """Last known view of one accessory, owned by the accessory cache."""

    identity: str
    display_name: str
    device_id: str | None = None
    device_name: str | None = None
    unit_index: int = 0
    capability: CapabilityKind | None = None
    value: StateValue | None = None
    restored: bool = False
    get_handler: GetHandler | None = field(default=None, repr=False, compare=False)
    set_handler: SetHandler | None = field(default=None, repr=False, compare=False)

    @property
    def device_number(self) -> int:
        """Return the 1-based number the API uses to address this unit."""

        return self.unit_index + 1

    @property
    def is_bound(self) -> bool:
        """Return True once discovery attached remote handlers."""

        return self.get_handler is not None and self.set_handler is not None

    @property
    def is_on(self) -> bool | None:
        """Collapse the characteristic value into an on/off flag."""

        if self.value is None:
            return None
        return bool(self.value)
