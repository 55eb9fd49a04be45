"""Movement state per cover and the control affordances derived from it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .const import BOUNDARY_TOLERANCE, POSITION_CLOSED, POSITION_OPEN

_LOGGER = logging.getLogger(__name__)


class MovementState(Enum):
    """Enum class for movement state."""

    IDLE = "idle"
    OPENING = "opening"
    CLOSING = "closing"


@dataclass(frozen=True)
class Affordances:
    """What the open and close controls of a cover should offer."""

    open_enabled: bool
    close_enabled: bool
    # Direction whose control shows "stop"; None while idle
    indicated_direction: MovementState | None

    @property
    def open_shows_stop(self) -> bool:
        return self.indicated_direction == MovementState.OPENING

    @property
    def close_shows_stop(self) -> bool:
        return self.indicated_direction == MovementState.CLOSING


def direction_for(current_position: int, target_position: int) -> MovementState:
    """Return the direction of a move.

    A target equal to the current position counts as closing.
    """
    if target_position > current_position:
        return MovementState.OPENING
    return MovementState.CLOSING


def derive_affordances(state: MovementState, position: int) -> Affordances:
    """Derive control affordances from movement state and position."""
    if state == MovementState.OPENING:
        return Affordances(
            open_enabled=True,
            close_enabled=False,
            indicated_direction=MovementState.OPENING,
        )
    if state == MovementState.CLOSING:
        return Affordances(
            open_enabled=False,
            close_enabled=True,
            indicated_direction=MovementState.CLOSING,
        )
    return Affordances(
        open_enabled=position < POSITION_OPEN - BOUNDARY_TOLERANCE,
        close_enabled=position > POSITION_CLOSED + BOUNDARY_TOLERANCE,
        indicated_direction=None,
    )


class CoverStateMachine:
    """Track whether one cover is idle, opening or closing."""

    __slots__ = ("cover_id", "_state")

    def __init__(self, cover_id: str) -> None:
        self.cover_id = cover_id
        self._state = MovementState.IDLE

    @property
    def state(self) -> MovementState:
        return self._state

    def is_moving(self) -> bool:
        return self._state != MovementState.IDLE

    def is_opening(self) -> bool:
        return self._state == MovementState.OPENING

    def is_closing(self) -> bool:
        return self._state == MovementState.CLOSING

    def begin(self, current_position: int, target_position: int) -> MovementState:
        """Start (or retarget) a movement. Returns the new direction.

        Valid from every state: a command while moving preempts the
        current movement, in either direction.
        """
        new_state = direction_for(current_position, target_position)
        self._transition(new_state)
        return new_state

    def finish(self) -> None:
        """Return to idle after arrival or stop."""
        self._transition(MovementState.IDLE)

    def affordances(self, position: int) -> Affordances:
        return derive_affordances(self._state, position)

    def _transition(self, new_state: MovementState) -> None:
        if new_state != self._state:
            _LOGGER.debug(
                "(%s) %s -> %s", self.cover_id, self._state.value, new_state.value
            )
        self._state = new_state
