"""Error types raised by the Tinxy integration."""

from __future__ import annotations


class TinxyError(RuntimeError):
    """Base class for integration errors."""


class ConfigurationError(TinxyError):
    """Raised when the integration configuration cannot start the platform."""


class FetchError(TinxyError):
    """Raised when the device listing cannot be retrieved or decoded."""


class ReadError(TinxyError):
    """Raised when the state of a single unit cannot be read."""


class WriteError(TinxyError):
    """Raised when a command for a single unit is rejected or not delivered."""


class InvalidIdentityInput(TinxyError):
    """Raised when a device descriptor cannot produce a stable identity."""
