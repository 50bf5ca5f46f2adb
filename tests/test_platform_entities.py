"""Tests for the Home Assistant entity platforms."""

from __future__ import annotations

from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest
from homeassistant.components.fan import FanEntityFeature
from homeassistant.components.light import ColorMode
from homeassistant.components.switch import SwitchDeviceClass
from homeassistant.exceptions import HomeAssistantError

from custom_components.tinxy import fan, light, switch
from custom_components.tinxy.classifier import CapabilityKind
from custom_components.tinxy.const import DOMAIN
from custom_components.tinxy.entity import async_add_platform_entities, resolve_host
from custom_components.tinxy.errors import WriteError
from custom_components.tinxy.fan import TinxyFanEntity
from custom_components.tinxy.light import TinxyLightEntity
from custom_components.tinxy.models import AccessoryRecord, Active
from custom_components.tinxy.switch import TinxySwitchEntity


class FakeSynchronizer:
    """Record state writes requested by entities."""

    def __init__(self, *, fail: bool = False) -> None:
        """Optionally fail every write."""

        self.fail = fail
        self.records: dict[str, AccessoryRecord] = {}
        self.writes: list[tuple[str, Any]] = []
        self.listeners: dict[str, list[Callable[[], None]]] = {}

    async def async_set_unit_state(self, identity: str, value: Any) -> None:
        """Apply ``value`` unless configured to fail."""

        if self.fail:
            raise WriteError("rejected")
        self.writes.append((identity, value))
        self.records[identity].value = value

    def async_add_listener(
        self, identity: str, update_callback: Callable[[], None]
    ) -> Callable[[], None]:
        """Track listener registration."""

        self.listeners.setdefault(identity, []).append(update_callback)
        return lambda: self.listeners[identity].remove(update_callback)


def _record(capability: CapabilityKind, **kwargs: Any) -> AccessoryRecord:
    defaults: dict[str, Any] = {
        "identity": f"{capability.value}-id",
        "display_name": f"Hall - {capability.value}",
        "device_id": "dev-1",
        "device_name": "Hall",
        "capability": capability,
    }
    defaults.update(kwargs)
    return AccessoryRecord(**defaults)


def _entity(entity_cls, record: AccessoryRecord, synchronizer: FakeSynchronizer):
    synchronizer.records[record.identity] = record
    return entity_cls(synchronizer, record)


@pytest.mark.asyncio
async def test_switch_entity_toggles_unit() -> None:
    """Switch entities mirror the record and publish booleans."""

    synchronizer = FakeSynchronizer()
    record = _record(CapabilityKind.SWITCH)
    entity = _entity(TinxySwitchEntity, record, synchronizer)

    assert entity.unique_id == "switch-id"
    assert entity.name == "Hall - switch"
    assert entity.device_class == SwitchDeviceClass.SWITCH
    assert entity.should_poll is False
    assert entity.available is False
    assert entity.is_on is None

    await entity.async_turn_on()
    assert entity.is_on is True
    assert entity.available is True
    await entity.async_turn_off()
    assert entity.is_on is False
    assert synchronizer.writes == [("switch-id", True), ("switch-id", False)]


def test_outlet_entity_uses_outlet_device_class() -> None:
    """Socket units appear as outlets on the switch platform."""

    entity = _entity(
        TinxySwitchEntity, _record(CapabilityKind.OUTLET), FakeSynchronizer()
    )

    assert entity.device_class == SwitchDeviceClass.OUTLET
    assert entity.device_info is not None
    assert (DOMAIN, "dev-1") in entity.device_info["identifiers"]


@pytest.mark.asyncio
async def test_light_entity_is_on_off_only() -> None:
    """Lights expose only the on/off colour mode."""

    synchronizer = FakeSynchronizer()
    entity = _entity(TinxyLightEntity, _record(CapabilityKind.LIGHT), synchronizer)

    assert entity.color_mode == ColorMode.ONOFF
    assert entity.supported_color_modes == {ColorMode.ONOFF}
    await entity.async_turn_on(brightness=128)
    assert synchronizer.writes == [("light-id", True)]
    assert entity.is_on is True


@pytest.mark.asyncio
async def test_fan_entity_publishes_active_values() -> None:
    """Fans translate turn on/off into Active/Inactive."""

    synchronizer = FakeSynchronizer()
    entity = _entity(TinxyFanEntity, _record(CapabilityKind.FAN), synchronizer)

    assert entity.supported_features & FanEntityFeature.TURN_ON
    await entity.async_turn_on()
    assert entity.is_on is True
    await entity.async_turn_off()
    assert entity.is_on is False
    assert synchronizer.writes == [
        ("fan-id", Active.ACTIVE),
        ("fan-id", Active.INACTIVE),
    ]


@pytest.mark.asyncio
async def test_write_error_surfaces_as_home_assistant_error() -> None:
    """Failed commands are reported to the user and leave the state alone."""

    synchronizer = FakeSynchronizer(fail=True)
    record = _record(CapabilityKind.SWITCH, value=False)
    entity = _entity(TinxySwitchEntity, record, synchronizer)

    with pytest.raises(HomeAssistantError):
        await entity.async_turn_on()
    assert entity.is_on is False


@pytest.mark.asyncio
async def test_entity_listener_lifecycle() -> None:
    """Entities subscribe on add and unsubscribe on removal."""

    synchronizer = FakeSynchronizer()
    record = _record(CapabilityKind.SWITCH)
    entity = _entity(TinxySwitchEntity, record, synchronizer)

    await entity.async_added_to_hass()
    assert len(synchronizer.listeners["switch-id"]) == 1

    record.display_name = "Renamed"
    synchronizer.listeners["switch-id"][0]()
    assert entity.name == "Renamed"

    await entity.async_will_remove_from_hass()
    assert synchronizer.listeners["switch-id"] == []


@pytest.mark.asyncio
async def test_platform_setup_hands_adder_to_host() -> None:
    """Each platform registers its adder with the stored accessory host."""

    registered: list[tuple[str, Any]] = []

    class _Host:
        async def async_register_platform(self, platform: str, adder: Any) -> None:
            registered.append((platform, adder))

    hass = SimpleNamespace(data={DOMAIN: {"entry-1": {"host": _Host()}}})
    entry = SimpleNamespace(entry_id="entry-1")

    def adder(entities: list[Any]) -> None:
        return None

    await switch.async_setup_entry(hass, entry, adder)
    await light.async_setup_entry(hass, entry, adder)
    await fan.async_setup_entry(hass, entry, adder)

    assert [platform for platform, _ in registered] == ["switch", "light", "fan"]


@pytest.mark.asyncio
async def test_platform_setup_without_host_is_noop() -> None:
    """Platforms do nothing when the entry has no stored host."""

    hass = SimpleNamespace(data={DOMAIN: {}})
    entry = SimpleNamespace(entry_id="missing")

    assert resolve_host(hass, entry) is None
    await switch.async_setup_entry(hass, entry, lambda entities: None)


@pytest.mark.asyncio
async def test_async_add_platform_entities_handles_sync_and_async() -> None:
    """Both sync and async adders are supported."""

    added: list[Any] = []

    def sync_adder(entities: list[Any]) -> None:
        added.extend(entities)

    async def async_adder(entities: list[Any]) -> None:
        added.extend(entities)

    await async_add_platform_entities(sync_adder, [1, 2])
    await async_add_platform_entities(async_adder, ["a"])
    await async_add_platform_entities(sync_adder, [])

    assert added == [1, 2, "a"]
