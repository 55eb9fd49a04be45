"""Safety lock switch for the smart_hub integration."""

from __future__ import annotations

from typing import Any

from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .controller import CoverController


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    controller: CoverController = hass.data[DOMAIN][entry.entry_id].controller
    async_add_entities([SafetyLockSwitch(controller, entry.entry_id)])


class SafetyLockSwitch(SwitchEntity):
    """On while the safety lock rejects cover commands.

    The lock is engaged at every start; turning the switch off releases it
    and resets all predicted movements.
    """

    _attr_should_poll = False
    _attr_name = "Safety lock"
    _attr_icon = "mdi:shield-lock"

    def __init__(self, controller: CoverController, entry_id: str) -> None:
        self._controller = controller
        self._attr_unique_id = f"{entry_id}_safety_lock"

    async def async_added_to_hass(self) -> None:
        self.async_on_remove(
            self._controller.async_add_listener(self._handle_controller_update)
        )

    @callback
    def _handle_controller_update(self, cover_id: str | None) -> None:
        if cover_id is None:
            self.async_write_ha_state()

    @property
    def is_on(self) -> bool:
        return self._controller.locked

    async def async_turn_on(self, **kwargs: Any) -> None:
        self._controller.lock_system()

    async def async_turn_off(self, **kwargs: Any) -> None:
        self._controller.unlock()
