"""Cover entities rendering smart_hub controller state."""

from __future__ import annotations

from typing import Any

from homeassistant.components.cover import (
    ATTR_POSITION,
    CoverDeviceClass,
    CoverEntity,
    CoverEntityFeature,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN, POSITION_CLOSED
from .controller import CoverCommand, CoverController
from .state_machine import MovementState

ATTR_MOVEMENT_STATE = "movement_state"
ATTR_OPEN_ENABLED = "open_enabled"
ATTR_CLOSE_ENABLED = "close_enabled"
ATTR_INDICATED_DIRECTION = "indicated_direction"
ATTR_ESTIMATED_POSITION = "estimated_position"
ATTR_COMMUNICATION_ERROR = "communication_error"


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up one cover entity per configured cover."""
    controller: CoverController = hass.data[DOMAIN][entry.entry_id].controller
    async_add_entities(
        SmartHubCover(controller, entry.entry_id, cover_id)
        for cover_id in controller.cover_ids
    )


class SmartHubCover(CoverEntity):
    """Projection of one controller cover; all logic lives in the controller."""

    _attr_should_poll = False
    _attr_assumed_state = True
    _attr_device_class = CoverDeviceClass.SHADE
    _attr_supported_features = (
        CoverEntityFeature.OPEN
        | CoverEntityFeature.CLOSE
        | CoverEntityFeature.STOP
        | CoverEntityFeature.SET_POSITION
    )

    def __init__(
        self, controller: CoverController, entry_id: str, cover_id: str
    ) -> None:
        self._controller = controller
        self._cover_id = cover_id
        self._attr_name = controller.record(cover_id).name
        self._attr_unique_id = f"{entry_id}_{cover_id}"

    async def async_added_to_hass(self) -> None:
        self.async_on_remove(
            self._controller.async_add_listener(self._handle_controller_update)
        )

    @callback
    def _handle_controller_update(self, cover_id: str | None) -> None:
        if cover_id is None or cover_id == self._cover_id:
            self.async_write_ha_state()

    @property
    def current_cover_position(self) -> int | None:
        """Return the believed position (the target while moving)."""
        return self._controller.position(self._cover_id)

    @property
    def is_opening(self) -> bool:
        return self._controller.state(self._cover_id) == MovementState.OPENING

    @property
    def is_closing(self) -> bool:
        return self._controller.state(self._cover_id) == MovementState.CLOSING

    @property
    def is_closed(self) -> bool:
        return self._controller.position(self._cover_id) == POSITION_CLOSED

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        affordances = self._controller.affordances(self._cover_id)
        direction = affordances.indicated_direction
        return {
            ATTR_MOVEMENT_STATE: self._controller.state(self._cover_id).value,
            ATTR_OPEN_ENABLED: affordances.open_enabled,
            ATTR_CLOSE_ENABLED: affordances.close_enabled,
            ATTR_INDICATED_DIRECTION: direction.value if direction else None,
            ATTR_ESTIMATED_POSITION: self._controller.predictor.estimated_position(
                self._cover_id
            ),
            ATTR_COMMUNICATION_ERROR: self._controller.record(
                self._cover_id
            ).communication_error,
        }

    async def async_open_cover(self, **kwargs: Any) -> None:
        self._controller.issue(self._cover_id, CoverCommand.open())

    async def async_close_cover(self, **kwargs: Any) -> None:
        self._controller.issue(self._cover_id, CoverCommand.close())

    async def async_stop_cover(self, **kwargs: Any) -> None:
        self._controller.issue(self._cover_id, CoverCommand.stop())

    async def async_set_cover_position(self, **kwargs: Any) -> None:
        if ATTR_POSITION in kwargs:
            self._controller.issue(
                self._cover_id, CoverCommand.go_to(kwargs[ATTR_POSITION])
            )
