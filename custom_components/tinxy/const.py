"""Constants for the Tinxy integration."""

from datetime import timedelta

DOMAIN = "tinxy"
MANUFACTURER = "Tinxy"

CONF_API_TOKEN = "api_token"
CONF_API_BASE_URL = "api_base_url"
CONF_POLL_INTERVAL = "poll_interval"
CONF_DEBUG = "debug"

DEFAULT_API_BASE_URL = "https://ha-backend.tinxy.in/v2"
DEFAULT_POLL_INTERVAL = 10
DISCOVERY_INTERVAL = timedelta(minutes=5)

DEVICES_PATH = "/devices/"
STATE_PATH = "/devices/{device_id}/state"
TOGGLE_PATH = "/devices/{device_id}/toggle"
