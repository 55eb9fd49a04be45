"""Exceptions raised by the smart_hub integration."""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError


class SmartHubError(HomeAssistantError):
    """Base class for smart_hub errors."""


class InvalidCover(SmartHubError):
    """Raised when a cover id is not part of the configuration."""

    def __init__(self, cover_id: str) -> None:
        super().__init__(f"Unknown cover: {cover_id}")
        self.cover_id = cover_id


class SystemLocked(SmartHubError):
    """Raised when a movement command arrives while the safety lock is engaged."""

    def __init__(self) -> None:
        super().__init__("Smart hub is locked, command ignored")


class DeviceUnreachable(SmartHubError):
    """Raised when a cover device fails to answer or answers with an error."""
