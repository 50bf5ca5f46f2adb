"""Fan platform for the Tinxy integration."""

from __future__ import annotations

from typing import Any

from homeassistant.components.fan import FanEntity, FanEntityFeature
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .entity import TinxyUnitEntity, resolve_host
from .models import Active


class TinxyFanEntity(TinxyUnitEntity, FanEntity):
    """Representation of a Tinxy fan unit driven by the Active characteristic."""

    _attr_supported_features = FanEntityFeature.TURN_ON | FanEntityFeature.TURN_OFF

    @property
    def is_on(self) -> bool | None:
        """Return whether the fan reports an active state."""

        if self.record.value is None:
            return None
        return self.record.value == Active.ACTIVE

    async def async_turn_on(
        self,
        percentage: int | None = None,
        preset_mode: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Activate the fan."""

        await self._async_publish_state(Active.ACTIVE)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Deactivate the fan."""

        await self._async_publish_state(Active.INACTIVE)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Hand the fan platform to the accessory host."""

    host = resolve_host(hass, entry)
    if host is None:
        return
    await host.async_register_platform("fan", async_add_entities)
