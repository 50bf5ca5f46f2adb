"""Configuration flow for the Tinxy integration."""

from __future__ import annotations

from typing import Any

import httpx
import voluptuous as vol
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.core import callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.httpx_client import get_async_client

from .api import TinxyClient
from .const import (
    CONF_API_BASE_URL,
    CONF_API_TOKEN,
    CONF_DEBUG,
    CONF_POLL_INTERVAL,
    DEFAULT_API_BASE_URL,
    DEFAULT_POLL_INTERVAL,
    DOMAIN,
)
from .errors import ConfigurationError, FetchError

TITLE = "Tinxy"


class CannotConnect(HomeAssistantError):
    """Raised when the integration cannot reach the Tinxy backend."""


class InvalidAuth(HomeAssistantError):
    """Raised when the API token is missing or rejected."""


_POLL_INTERVAL_VALIDATOR = vol.All(vol.Coerce(int), vol.Range(min=1))

_USER_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_API_TOKEN): str,
        vol.Optional(CONF_API_BASE_URL, default=DEFAULT_API_BASE_URL): str,
        vol.Optional(
            CONF_POLL_INTERVAL, default=DEFAULT_POLL_INTERVAL
        ): _POLL_INTERVAL_VALIDATOR,
        vol.Optional(CONF_DEBUG, default=False): bool,
    }
)


def build_options_schema(defaults: dict[str, Any]) -> vol.Schema:
    """Construct the options schema seeded with ``defaults``."""

    return vol.Schema(
        {
            vol.Optional(
                CONF_POLL_INTERVAL,
                default=defaults.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL),
            ): _POLL_INTERVAL_VALIDATOR,
            vol.Optional(
                CONF_DEBUG, default=bool(defaults.get(CONF_DEBUG, False))
            ): bool,
        }
    )


async def async_validate_token(client: TinxyClient) -> int:
    """Check the token by listing devices; return how many were found."""

    try:
        devices = await client.async_list_devices()
    except FetchError as err:
        cause = err.__cause__
        if isinstance(cause, httpx.HTTPStatusError) and cause.response.status_code in {
            401,
            403,
        }:
            raise InvalidAuth from err
        raise CannotConnect from err
    return len(devices)


class TinxyConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle the configuration workflow for the integration."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Collect the API token and polling preferences."""

        if user_input is None:
            return self.async_show_form(step_id="user", data_schema=_USER_SCHEMA)

        data = dict(_USER_SCHEMA(user_input))
        data[CONF_API_TOKEN] = data[CONF_API_TOKEN].strip()
        self._async_abort_entries_match({CONF_API_TOKEN: data[CONF_API_TOKEN]})

        errors: dict[str, str] = {}
        try:
            client = TinxyClient(
                get_async_client(self.hass),
                data[CONF_API_TOKEN],
                base_url=data[CONF_API_BASE_URL],
            )
            await async_validate_token(client)
        except (ConfigurationError, InvalidAuth):
            errors["base"] = "invalid_auth"
        except CannotConnect:
            errors["base"] = "cannot_connect"

        if errors:
            return self.async_show_form(
                step_id="user", data_schema=_USER_SCHEMA, errors=errors
            )

        return self.async_create_entry(title=TITLE, data=data)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> OptionsFlow:
        """Return the options flow handler for Home Assistant."""

        return TinxyOptionsFlowHandler()


class TinxyOptionsFlowHandler(OptionsFlow):
    """Allow tuning polling and debug logging after setup."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Render the options form and persist submitted values."""

        defaults = {**self.config_entry.data, **self.config_entry.options}
        schema = build_options_schema(defaults)
        if user_input is None:
            return self.async_show_form(step_id="init", data_schema=schema)
        return self.async_create_entry(data=schema(user_input))
