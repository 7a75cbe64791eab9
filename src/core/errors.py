"""Error taxonomy shared by the core and its adapters."""

from __future__ import annotations

from typing import Optional


class RelayError(Exception):
    """Base class for every error raised by the relay pipeline."""


class ConfigurationError(RelayError):
    """A required credential or setting is missing or invalid."""


class FetchError(RelayError):
    """The remote feed could not be retrieved or decoded."""


class RemoteAPIError(RelayError):
    """The remote API answered with a non-success status."""

    def __init__(self, status: int, message: Optional[str] = None) -> None:
        self.status = status
        self.message = message or ""
        detail = f": {self.message}" if self.message else ""
        super().__init__(f"Remote API returned status {status}{detail}")


class UnsupportedMediaError(RelayError):
    """A resource kind the transport does not know how to send."""


class InvalidArgumentError(RelayError):
    """An operator-supplied argument is out of range or malformed."""
