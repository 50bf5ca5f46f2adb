"""Switch platform for the Tinxy integration."""

from __future__ import annotations

from typing import Any

from homeassistant.components.switch import SwitchDeviceClass, SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .classifier import CapabilityKind
from .entity import TinxyUnitEntity, resolve_host


class TinxySwitchEntity(TinxyUnitEntity, SwitchEntity):
    """Representation of a Tinxy switch or socket unit."""

    def __init__(self, synchronizer: Any, record: Any) -> None:
        """Mark socket units as outlets."""

        super().__init__(synchronizer, record)
        if record.capability is CapabilityKind.OUTLET:
            self._attr_device_class = SwitchDeviceClass.OUTLET
        else:
            self._attr_device_class = SwitchDeviceClass.SWITCH

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Turn the unit on."""

        await self._async_publish_state(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Turn the unit off."""

        await self._async_publish_state(False)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Hand the switch platform to the accessory host."""

    host = resolve_host(hass, entry)
    if host is None:
        return
    await host.async_register_platform("switch", async_add_entities)
