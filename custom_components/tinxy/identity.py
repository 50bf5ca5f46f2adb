"""Stable accessory identities derived from Tinxy device ids."""

from __future__ import annotations

import uuid

from .errors import InvalidIdentityInput

IDENTITY_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "https://tinxy.in/homeassistant")
UNIT_SEPARATOR = "#"


def resolve_identity(device_id: str, unit_count: int, index: int = 0) -> str:
    """Return the identity of unit ``index`` of a device with ``unit_count`` units.

    Single-unit devices are identified by their device id alone so the
    identity survives the device gaining an index. Multi-unit devices mix
    the index in behind ``UNIT_SEPARATOR``, which is rejected inside device
    ids so the two seed shapes can never overlap.
    """

    if not isinstance(device_id, str) or not device_id:
        raise InvalidIdentityInput("Device id must be a non-empty string")
    if UNIT_SEPARATOR in device_id:
        raise InvalidIdentityInput(
            f"Device id {device_id!r} contains reserved character {UNIT_SEPARATOR!r}"
        )
    if index < 0:
        raise InvalidIdentityInput(f"Unit index must be non-negative, got {index}")

    if unit_count <= 1:
        seed = device_id
    else:
        seed = f"{device_id}{UNIT_SEPARATOR}{index}"
    return str(uuid.uuid5(IDENTITY_NAMESPACE, seed))
