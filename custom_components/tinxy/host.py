"""Home Assistant side of the accessory register/update contract."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from .classifier import CapabilityKind
from .entity import TinxyUnitEntity, async_add_platform_entities
from .fan import TinxyFanEntity
from .light import TinxyLightEntity
from .models import AccessoryRecord
from .switch import TinxySwitchEntity

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .coordinator import TinxyAccessorySynchronizer

_LOGGER = logging.getLogger(__name__)

ENTITY_FACTORIES: dict[CapabilityKind, type[TinxyUnitEntity]] = {
    CapabilityKind.FAN: TinxyFanEntity,
    CapabilityKind.LIGHT: TinxyLightEntity,
    CapabilityKind.OUTLET: TinxySwitchEntity,
    CapabilityKind.SWITCH: TinxySwitchEntity,
}

PLATFORMS: tuple[str, ...] = ("fan", "light", "switch")


class HomeAssistantAccessoryHost:
    """Turn accessory records into entities on their Home Assistant platform."""

    def __init__(self) -> None:
        """Start without platforms; they hand over their adders during setup."""

        self.synchronizer: TinxyAccessorySynchronizer | None = None
        self._adders: dict[str, Callable[[list[Any]], Any]] = {}
        self._queued: dict[str, list[TinxyUnitEntity]] = {}
        self._entities: dict[str, TinxyUnitEntity] = {}

    def accessories(self) -> list[TinxyUnitEntity]:
        """Return the entities backing the cached accessory records."""

        if self.synchronizer is None:
            return list(self._entities.values())
        return [
            self._entities[record.identity]
            for record in self.synchronizer.accessories()
            if record.identity in self._entities
        ]

    def entity_for(self, identity: str) -> TinxyUnitEntity | None:
        """Return the live entity for ``identity`` if one was created."""

        return self._entities.get(identity)

    async def async_register_platform(
        self, platform: str, async_add_entities: Callable[[list[Any]], Any]
    ) -> None:
        """Record a platform's adder and flush entities queued for it."""

        self._adders[platform] = async_add_entities
        queued = self._queued.pop(platform, [])
        await async_add_platform_entities(async_add_entities, queued)

    async def async_register_accessories(
        self, records: Sequence[AccessoryRecord]
    ) -> None:
        """Create entities for accessories seen for the first time."""

        await self._async_add(records)

    async def async_update_accessories(
        self, records: Sequence[AccessoryRecord]
    ) -> None:
        """Refresh known accessories, attaching entities where none exist yet."""

        missing: list[AccessoryRecord] = []
        for record in records:
            entity = self._entities.get(record.identity)
            if entity is None:
                missing.append(record)
                continue
            if entity.capability is not record.capability:
                _LOGGER.debug(
                    "Replacing %s entity for %s", entity.capability, record.identity
                )
                self._entities.pop(record.identity, None)
                if getattr(entity, "hass", None) is not None:
                    await entity.async_remove(force_remove=True)
                missing.append(record)
                continue
            entity.handle_record_update()
        if missing:
            await self._async_add(missing)

    async def _async_add(self, records: Sequence[AccessoryRecord]) -> None:
        """Build entities for ``records`` and hand them to their platforms."""

        if self.synchronizer is None:
            raise RuntimeError("Accessory host is not bound to a synchronizer")

        by_platform: dict[str, list[TinxyUnitEntity]] = {}
        for record in records:
            if record.capability is None:
                _LOGGER.debug("No capability for %s yet", record.display_name)
                continue
            entity = ENTITY_FACTORIES[record.capability](self.synchronizer, record)
            self._entities[record.identity] = entity
            by_platform.setdefault(record.capability.platform, []).append(entity)

        for platform, entities in by_platform.items():
            adder = self._adders.get(platform)
            if adder is None:
                self._queued.setdefault(platform, []).extend(entities)
                continue
            await async_add_platform_entities(adder, entities)
