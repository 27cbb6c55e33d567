"""Bridge domain exceptions."""

from __future__ import annotations


class BridgeError(Exception):
    """Base for bridge domain errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_error = original_error


class ConfigurationError(BridgeError):
    """Missing or malformed configuration. Fatal at startup."""


class UnresolvedReference(BridgeError):
    """A mention or channel token in a Discord message could not be resolved."""


class TargetChannelUnavailable(BridgeError):
    """Mapped Discord channel exists in config but the bot cannot see it."""
