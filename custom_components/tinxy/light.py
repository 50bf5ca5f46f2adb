"""Light platform for the Tinxy integration."""

from __future__ import annotations

from typing import Any

from homeassistant.components.light import ColorMode, LightEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .entity import TinxyUnitEntity, resolve_host


class TinxyLightEntity(TinxyUnitEntity, LightEntity):
    """Representation of a Tinxy light unit; Tinxy lights are on/off only."""

    _attr_color_mode = ColorMode.ONOFF
    _attr_supported_color_modes = {ColorMode.ONOFF}

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Turn the light on."""

        await self._async_publish_state(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Turn the light off."""

        await self._async_publish_state(False)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Hand the light platform to the accessory host."""

    host = resolve_host(hass, entry)
    if host is None:
        return
    await host.async_register_platform("light", async_add_entities)
