"""Shared helper functions for the smart_hub integration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.core import HomeAssistant

from .const import DOMAIN, POSITION_CLOSED, POSITION_OPEN
from .exceptions import InvalidCover

if TYPE_CHECKING:
    from .controller import CoverController


def clamp_position(position) -> int:
    """Clamp a percentage to the 0..100 cover range."""
    return max(POSITION_CLOSED, min(POSITION_OPEN, int(round(float(position)))))


def iter_controllers(hass: HomeAssistant):
    """Yield the controller of every loaded smart_hub entry."""
    for data in hass.data.get(DOMAIN, {}).values():
        yield data.controller


def resolve_controller(hass: HomeAssistant, cover_id: str) -> CoverController:
    """Return the controller that owns cover_id.

    Raises InvalidCover when no loaded entry knows the id.
    """
    for controller in iter_controllers(hass):
        if cover_id in controller.cover_ids:
            return controller
    raise InvalidCover(cover_id)
