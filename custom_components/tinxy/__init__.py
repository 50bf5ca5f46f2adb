"""Integration entry point for the Tinxy custom component."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, TypedDict

import homeassistant.helpers.config_validation as cv
import homeassistant.helpers.entity_registry as er
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import CALLBACK_TYPE, HomeAssistant
from homeassistant.helpers.event import async_track_time_interval
from homeassistant.helpers.httpx_client import get_async_client
from homeassistant.helpers.typing import ConfigType

from .api import TinxyClient
from .classifier import CapabilityKind
from .const import (
    CONF_API_BASE_URL,
    CONF_API_TOKEN,
    CONF_DEBUG,
    CONF_POLL_INTERVAL,
    DEFAULT_API_BASE_URL,
    DEFAULT_POLL_INTERVAL,
    DISCOVERY_INTERVAL,
    DOMAIN,
)
from .coordinator import TinxyAccessorySynchronizer
from .errors import ConfigurationError
from .host import PLATFORMS, HomeAssistantAccessoryHost

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "DOMAIN",
    "PLATFORMS",
    "async_setup",
    "async_setup_entry",
    "async_unload_entry",
]

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)


class DomainData(TypedDict):
    """Type definition for the per-entry integration data."""

    client: TinxyClient
    host: HomeAssistantAccessoryHost
    synchronizer: TinxyAccessorySynchronizer
    discovery_unsub: CALLBACK_TYPE | None


async def async_setup(hass: HomeAssistant, _config: ConfigType) -> bool:
    """Initialise the integration namespace on Home Assistant startup."""

    hass.data.setdefault(DOMAIN, {})
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up a config entry for the integration."""

    settings = _entry_settings(entry)
    try:
        client = TinxyClient(
            get_async_client(hass),
            settings.get(CONF_API_TOKEN),
            base_url=settings.get(CONF_API_BASE_URL) or DEFAULT_API_BASE_URL,
        )
    except ConfigurationError as err:
        _LOGGER.error("Tinxy platform not started: %s", err)
        return False

    host = HomeAssistantAccessoryHost()
    synchronizer = TinxyAccessorySynchronizer(
        client=client,
        host=host,
        poll_interval=timedelta(
            seconds=int(settings.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL))
        ),
        debug=bool(settings.get(CONF_DEBUG, False)),
        loop=hass.loop,
    )
    host.synchronizer = synchronizer
    _restore_accessories(synchronizer, _get_entity_registry(hass), entry)

    entry_data: DomainData = {
        "client": client,
        "host": host,
        "synchronizer": synchronizer,
        "discovery_unsub": None,
    }
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = entry_data

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    _LOGGER.debug("Tinxy platform finished launching")

    await _async_discover_and_refresh(synchronizer)
    synchronizer.async_schedule_reconcile()
    entry_data["discovery_unsub"] = _schedule_discovery(hass, synchronizer)
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Handle unloading of a config entry."""

    unload_success = await hass.config_entries.async_unload_platforms(
        entry, PLATFORMS
    )

    entry_data: DomainData | None = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if entry_data is None:
        return unload_success

    entry_data["synchronizer"].cancel_refresh()
    discovery_unsub = entry_data.get("discovery_unsub")
    if callable(discovery_unsub):
        discovery_unsub()

    return unload_success


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry so option changes take effect."""

    await hass.config_entries.async_reload(entry.entry_id)


def _entry_settings(entry: ConfigEntry) -> dict[str, Any]:
    """Merge entry data with options; options win."""

    data = getattr(entry, "data", {}) or {}
    options = getattr(entry, "options", {}) or {}
    return {**data, **options}


def _get_entity_registry(hass: HomeAssistant) -> er.EntityRegistry:
    """Return the Home Assistant entity registry."""

    return er.async_get(hass)


def _restore_accessories(
    synchronizer: TinxyAccessorySynchronizer,
    registry: er.EntityRegistry,
    entry: ConfigEntry,
) -> None:
    """Seed the accessory cache from entities registered in earlier runs."""

    for registry_entry in er.async_entries_for_config_entry(registry, entry.entry_id):
        if not registry_entry.unique_id:
            continue
        synchronizer.async_restore_accessory(
            registry_entry.unique_id,
            registry_entry.original_name
            or registry_entry.name
            or registry_entry.unique_id,
            capability=_capability_from_registry(registry_entry),
        )


def _capability_from_registry(registry_entry: Any) -> CapabilityKind | None:
    """Infer the capability kind of a registered entity from its platform."""

    domain = getattr(registry_entry, "domain", None)
    if domain == "fan":
        return CapabilityKind.FAN
    if domain == "light":
        return CapabilityKind.LIGHT
    if domain == "switch":
        if getattr(registry_entry, "original_device_class", None) == "outlet":
            return CapabilityKind.OUTLET
        return CapabilityKind.SWITCH
    return None


def _schedule_discovery(
    hass: HomeAssistant, synchronizer: TinxyAccessorySynchronizer
) -> CALLBACK_TYPE:
    """Re-run discovery periodically using the Home Assistant event helper."""

    async def _async_discover(_now: Any | None = None) -> None:
        await _async_discover_and_refresh(synchronizer)

    return async_track_time_interval(hass, _async_discover, DISCOVERY_INTERVAL)


async def _async_discover_and_refresh(
    synchronizer: TinxyAccessorySynchronizer,
) -> None:
    """Run discovery, reading state at once for accessories that have none."""

    result = await synchronizer.async_discover_devices()
    if any(record.value is None for record in (*result.registered, *result.updated)):
        await synchronizer.async_reconcile()
