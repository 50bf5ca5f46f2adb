"""REST client for the Tinxy cloud backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .const import DEFAULT_API_BASE_URL, DEVICES_PATH, STATE_PATH, TOGGLE_PATH
from .errors import ConfigurationError, FetchError, ReadError, WriteError

_LOGGER = logging.getLogger(__name__)

_ON_STATES = frozenset({"on", "1", "true"})
_OFF_STATES = frozenset({"off", "0", "false"})


def parse_unit_state(value: Any) -> bool:
    """Convert a state field from the API into a boolean.

    The backend reports ``"on"``/``"off"`` in inconsistent casing, and some
    firmware answers with ``1``/``0`` instead.
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        if value in (0, 1):
            return bool(value)
    elif isinstance(value, str):
        normalised = value.strip().lower()
        if normalised in _ON_STATES:
            return True
        if normalised in _OFF_STATES:
            return False
    raise ValueError(f"Unrecognised unit state {value!r}")


class TinxyClient:
    """Issue authenticated list/read/write requests against the Tinxy API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_token: str | None,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
    ) -> None:
        """Bind the shared HTTP client and bearer token.

        The token is validated here, before any request can be issued.
        """

        if not api_token or not str(api_token).strip():
            raise ConfigurationError("API token not provided")
        self._client = client
        self._api_token = str(api_token).strip()
        self._base_url = (base_url or DEFAULT_API_BASE_URL).rstrip("/")

    @property
    def base_url(self) -> str:
        """Return the API root requests are issued against."""

        return self._base_url

    def _url(self, path: str, **params: str) -> str:
        return f"{self._base_url}{path.format(**params)}"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def async_list_devices(self) -> list[dict[str, Any]]:
        """Return the raw device listing for the account."""

        try:
            response = await self._client.get(
                self._url(DEVICES_PATH), headers=self._headers()
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as err:
            raise FetchError(f"Unable to list Tinxy devices: {err}") from err

        if isinstance(payload, dict):
            # Some deployments wrap the listing in an envelope.
            payload = payload.get("devices", payload.get("data"))
        if not isinstance(payload, list):
            raise FetchError(f"Unexpected device listing payload: {payload!r}")
        return payload

    async def async_read_unit_state(self, device_id: str, unit_index: int) -> bool:
        """Return whether unit ``unit_index`` of ``device_id`` is on."""

        try:
            response = await self._client.get(
                self._url(STATE_PATH, device_id=device_id),
                params={"deviceNumber": unit_index + 1},
                headers=self._headers(),
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as err:
            raise ReadError(
                f"Unable to read state of {device_id} unit {unit_index + 1}: {err}"
            ) from err

        if not isinstance(payload, dict) or "state" not in payload:
            raise ReadError(f"State missing for {device_id}: {payload!r}")
        try:
            return parse_unit_state(payload["state"])
        except ValueError as err:
            raise ReadError(str(err)) from err

    async def async_write_unit_state(
        self, device_id: str, unit_index: int, desired: bool
    ) -> dict[str, Any]:
        """Switch unit ``unit_index`` of ``device_id`` on or off."""

        body = {
            "request": {"state": 1 if desired else 0},
            "deviceNumber": unit_index + 1,
        }
        try:
            response = await self._client.post(
                self._url(TOGGLE_PATH, device_id=device_id),
                json=body,
                headers=self._headers(),
            )
            response.raise_for_status()
            ack = response.json() if response.content else {}
        except (httpx.HTTPError, ValueError) as err:
            raise WriteError(
                f"Unable to switch {device_id} unit {unit_index + 1} "
                f"{'on' if desired else 'off'}: {err}"
            ) from err

        _LOGGER.debug("Toggle acknowledged for %s/%s: %s", device_id, unit_index, ack)
        return ack if isinstance(ack, dict) else {"response": ack}
