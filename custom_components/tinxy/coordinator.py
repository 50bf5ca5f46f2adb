"""Accessory synchronizer for the Tinxy integration."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine, Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Protocol, cast

from .api import TinxyClient
from .cache import AccessoryCache
from .classifier import CapabilityKind, classify
from .const import DEFAULT_POLL_INTERVAL
from .errors import FetchError, InvalidIdentityInput, ReadError, WriteError
from .identity import resolve_identity
from .models import (
    AccessoryRecord,
    Active,
    DeviceDescriptor,
    GetHandler,
    SetHandler,
    StateValue,
    Unit,
)

_LOGGER = logging.getLogger(__name__)


class AccessoryHost(Protocol):
    """Operations the synchronizer needs from the accessory framework."""

    async def async_register_accessories(
        self, records: Sequence[AccessoryRecord]
    ) -> None:
        """Expose newly discovered accessories."""

    async def async_update_accessories(
        self, records: Sequence[AccessoryRecord]
    ) -> None:
        """Refresh accessories that are already known to the framework."""


@dataclass(slots=True)
class DiscoveryResult:
    """Outcome of a single discovery pass."""

    registered: list[AccessoryRecord] = field(default_factory=list)
    updated: list[AccessoryRecord] = field(default_factory=list)
    skipped: int = 0
    fetched: bool = False


@dataclass(frozen=True, slots=True)
class _ResolvedUnit:
    unit: Unit
    identity: str
    capability: CapabilityKind
    device_name: str


class TinxyAccessorySynchronizer:
    """Keep the accessory cache in step with the Tinxy device listing."""

    def __init__(
        self,
        *,
        client: TinxyClient,
        host: AccessoryHost,
        cache: AccessoryCache | None = None,
        poll_interval: timedelta | None = None,
        debug: bool = False,
        loop: asyncio.AbstractEventLoop | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Store collaborators; no network traffic happens until discovery."""

        self._client = client
        self._host = host
        self.cache = cache if cache is not None else AccessoryCache()
        self.poll_interval = poll_interval or timedelta(seconds=DEFAULT_POLL_INTERVAL)
        self.debug = debug
        self._loop = loop
        self._logger = logger or _LOGGER
        self._refresh_task: asyncio.TimerHandle | None = None
        self._pending_tasks: set[asyncio.Task[Any]] = set()
        self._listeners: dict[str, list[Callable[[], None]]] = {}

    def _trace(self, msg: str, *args: Any) -> None:
        """Log verbose traces at INFO when the debug option is enabled."""

        level = logging.INFO if self.debug else logging.DEBUG
        self._logger.log(level, msg, *args)

    def accessories(self) -> list[AccessoryRecord]:
        """Return every cached accessory record."""

        return self.cache.values()

    def async_restore_accessory(
        self,
        identity: str,
        display_name: str,
        capability: CapabilityKind | None = None,
    ) -> AccessoryRecord:
        """Seed the cache with an accessory the framework already knows."""

        self._trace("Configuring cached accessory: %s", display_name)
        record, _created = self.cache.get_or_insert(
            identity,
            lambda: AccessoryRecord(
                identity=identity,
                display_name=display_name,
                capability=capability,
                restored=True,
            ),
        )
        return record

    async def async_discover_devices(self) -> DiscoveryResult:
        """Run one discovery pass and emit register/update actions."""

        result = DiscoveryResult()
        try:
            payloads = await self._client.async_list_devices()
        except FetchError as err:
            self._logger.error("Failed to discover devices: %s", err)
            return result
        result.fetched = True
        self._trace("Received devices: %s", payloads)

        for payload in payloads:
            try:
                resolved_units = self._resolve_units(payload)
            except InvalidIdentityInput as err:
                self._logger.error("Skipping device %s: %s", payload, err)
                result.skipped += 1
                continue
            for resolved in resolved_units:
                record, created = self.cache.get_or_insert(
                    resolved.identity,
                    lambda resolved=resolved: AccessoryRecord(
                        identity=resolved.identity,
                        display_name=resolved.unit.name,
                    ),
                )
                self._apply_descriptor(record, resolved)
                if created:
                    result.registered.append(record)
                else:
                    result.updated.append(record)

        if result.registered:
            await self._host.async_register_accessories(result.registered)
        if result.updated:
            await self._host.async_update_accessories(result.updated)
        self._trace(
            "Discovered %d devices: %d registered, %d updated, %d skipped",
            len(payloads),
            len(result.registered),
            len(result.updated),
            result.skipped,
        )
        return result

    def _resolve_units(self, payload: dict[str, Any]) -> list[_ResolvedUnit]:
        """Derive identity and capability for every unit of ``payload``."""

        descriptor = DeviceDescriptor.from_dict(payload)
        capability = classify(descriptor.device_types)
        return [
            _ResolvedUnit(
                unit=unit,
                identity=resolve_identity(
                    descriptor.device_id, descriptor.unit_count, unit.index
                ),
                capability=capability,
                device_name=descriptor.name,
            )
            for unit in descriptor.units()
        ]

    def _apply_descriptor(
        self, record: AccessoryRecord, resolved: _ResolvedUnit
    ) -> None:
        """Copy descriptor fields onto ``record`` and rebind its handlers."""

        if record.capability not in (None, resolved.capability):
            self._logger.warning(
                "%s changed from %s to %s",
                resolved.unit.name,
                record.capability,
                resolved.capability,
            )
            record.value = None
        record.display_name = resolved.unit.name
        record.device_id = resolved.unit.device_id
        record.device_name = resolved.device_name
        record.unit_index = resolved.unit.index
        record.capability = resolved.capability
        record.restored = False
        self._bind_handlers(record)

    def _bind_handlers(self, record: AccessoryRecord) -> None:
        """Attach get/set handlers closed over the record's device and unit."""

        device_id = record.device_id
        unit_index = record.unit_index
        name = record.display_name
        active = record.capability is not None and record.capability.uses_active_state
        if device_id is None:
            raise InvalidIdentityInput(f"{name} has no device id to bind")

        async def _get() -> StateValue:
            self._logger.debug("Triggered GET %s", "Active" if active else "On")
            try:
                is_on = await self._client.async_read_unit_state(device_id, unit_index)
            except ReadError as err:
                self._logger.error("Failed to get status of %s: %s", name, err)
                is_on = False
            if active:
                return Active.ACTIVE if is_on else Active.INACTIVE
            return is_on

        async def _set(value: StateValue) -> None:
            desired = bool(value)
            self._logger.debug("Triggered SET %s: %s", name, value)
            try:
                await self._client.async_write_unit_state(
                    device_id, unit_index, desired
                )
            except WriteError as err:
                self._logger.error(
                    "Failed to set %s to %s: %s", name, "on" if desired else "off", err
                )
                raise
            self._logger.debug("Set %s to %s", name, "on" if desired else "off")

        record.get_handler = _get
        record.set_handler = _set

    def _require_record(self, identity: str) -> AccessoryRecord:
        record = self.cache.get(identity)
        if record is None:
            raise KeyError(identity)
        if not record.is_bound:
            raise InvalidIdentityInput(
                f"{record.display_name} has not been discovered yet"
            )
        return record

    async def async_refresh_unit(self, identity: str) -> StateValue:
        """Pull the remote state of one accessory into its record."""

        record = self._require_record(identity)
        get_handler = cast(GetHandler, record.get_handler)
        record.value = await get_handler()
        self._notify(identity)
        return record.value

    async def async_set_unit_state(self, identity: str, value: StateValue) -> None:
        """Send ``value`` to the remote unit, keeping the cached value on failure."""

        record = self._require_record(identity)
        set_handler = cast(SetHandler, record.set_handler)
        await set_handler(value)
        record.value = value
        self._notify(identity)

    async def async_reconcile(self) -> dict[str, StateValue | BaseException]:
        """Refresh every discovered accessory, isolating per-accessory failures."""

        identities = [record.identity for record in self.cache.values() if record.is_bound]
        results = await asyncio.gather(
            *(self.async_refresh_unit(identity) for identity in identities),
            return_exceptions=True,
        )
        outcome: dict[str, StateValue | BaseException] = {}
        for identity, value in zip(identities, results, strict=True):
            if isinstance(value, BaseException):
                if isinstance(value, asyncio.CancelledError):
                    raise value
                self._logger.error("Failed to refresh accessory %s: %s", identity, value)
            outcome[identity] = value
        return outcome

    def async_add_listener(
        self, identity: str, update_callback: Callable[[], None]
    ) -> Callable[[], None]:
        """Call ``update_callback`` whenever the record for ``identity`` changes."""

        callbacks = self._listeners.setdefault(identity, [])
        callbacks.append(update_callback)

        def _remove() -> None:
            if update_callback in callbacks:
                callbacks.remove(update_callback)
            if not callbacks and self._listeners.get(identity) is callbacks:
                del self._listeners[identity]

        return _remove

    def _notify(self, identity: str) -> None:
        for update_callback in list(self._listeners.get(identity, ())):
            update_callback()

    def async_schedule_reconcile(
        self,
        callback: Callable[[], Coroutine[Any, Any, Any] | None] | None = None,
    ) -> asyncio.TimerHandle:
        """Schedule ``callback`` (reconciliation by default) every poll interval."""

        loop = self._loop or asyncio.get_running_loop()
        self._loop = loop
        callback = callback or self.async_reconcile
        interval = self.poll_interval.total_seconds()

        def _wrapper() -> None:
            task = callback()
            if isinstance(task, Coroutine):
                task_obj = loop.create_task(task)
                self._pending_tasks.add(task_obj)
                task_obj.add_done_callback(self._pending_tasks.discard)
            self._refresh_task = loop.call_later(interval, _wrapper)

        if self._refresh_task is not None:
            self._refresh_task.cancel()
        self._refresh_task = loop.call_later(interval, _wrapper)
        return self._refresh_task

    def cancel_refresh(self) -> None:
        """Cancel the reconciliation timer and any in-flight passes."""

        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None
        for task in list(self._pending_tasks):
            task.cancel()
        self._pending_tasks.clear()
