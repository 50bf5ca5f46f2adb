"""Shared entity helpers for the Tinxy integration."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import Entity

from .const import DOMAIN, MANUFACTURER
from .errors import WriteError
from .models import AccessoryRecord, StateValue

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .coordinator import TinxyAccessorySynchronizer


class TinxyUnitEntity(Entity):
    """Base entity bound to one cached accessory record."""

    _attr_should_poll = False

    def __init__(
        self, synchronizer: TinxyAccessorySynchronizer, record: AccessoryRecord
    ) -> None:
        """Bind the synchronizer and the record this entity mirrors."""

        self.synchronizer = synchronizer
        self.record = record
        self.capability = record.capability
        self._remove_listener: Callable[[], None] | None = None
        self._attr_unique_id = record.identity
        self._attr_name = record.display_name
        if record.device_id is not None:
            self._attr_device_info = DeviceInfo(
                identifiers={(DOMAIN, record.device_id)},
                manufacturer=MANUFACTURER,
                name=record.device_name or record.display_name,
            )

    async def async_added_to_hass(self) -> None:
        """Subscribe to record updates once the entity is added."""

        self._remove_listener = self.synchronizer.async_add_listener(
            self.record.identity, self.handle_record_update
        )

    async def async_will_remove_from_hass(self) -> None:
        """Detach listeners when the entity is removed."""

        remove = self._remove_listener
        if remove is not None:
            remove()
            self._remove_listener = None
        await super().async_will_remove_from_hass()

    def handle_record_update(self) -> None:
        """Write Home Assistant state after the record changed."""

        self._attr_name = self.record.display_name
        # Queued entities have no hass until their platform adds them.
        if getattr(self, "hass", None) is not None:
            self.async_write_ha_state()

    @property
    def available(self) -> bool:
        """Report availability once a remote value has been read."""

        return self.record.value is not None

    @property
    def is_on(self) -> bool | None:
        """Return whether the unit reports an on state."""

        return self.record.is_on

    async def _async_publish_state(self, value: StateValue) -> None:
        """Send ``value`` to the remote unit, surfacing failures to the user."""

        try:
            await self.synchronizer.async_set_unit_state(self.record.identity, value)
        except WriteError as err:
            raise HomeAssistantError(str(err)) from err


async def async_add_platform_entities(
    async_add_entities: Callable[[list[Any]], Any], entities: list[Any]
) -> None:
    """Add entities for a Home Assistant platform, awaiting when required."""

    if not entities:
        return
    result = async_add_entities(entities)
    if asyncio.iscoroutine(result):
        await result


def resolve_host(hass: Any, entry: Any) -> Any | None:
    """Return the accessory host stored for ``entry`` when available."""

    entry_id = entry.entry_id if hasattr(entry, "entry_id") else None
    entry_data = hass.data.get(DOMAIN, {}).get(entry_id)
    if isinstance(entry_data, dict):
        return entry_data.get("host")
    return None
