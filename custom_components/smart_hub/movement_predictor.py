"""Arrival prediction for covers driven by a fixed full-travel time.

Uses Home Assistant convention: 0 = fully closed, 100 = fully open. The
duration of a move is linear in the distance travelled, with a single
travel time for both directions.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers.event import async_call_later

_LOGGER = logging.getLogger(__name__)


def calculate_travel_time(
    start_position: int, target_position: int, full_travel_time: float
) -> float:
    """Return seconds needed to travel between two positions."""
    return full_travel_time * abs(target_position - start_position) / 100


@dataclass
class PendingArrival:
    """A scheduled arrival owned by one cover movement."""

    start_position: int
    target_position: int
    duration: float
    started_at: float = field(default_factory=time.monotonic)
    unsub: CALLBACK_TYPE | None = field(default=None, repr=False)

    def remaining(self) -> float:
        return max(0.0, self.started_at + self.duration - time.monotonic())

    def estimated_position(self) -> int:
        """Linear interpolation between start and target."""
        if self.duration <= 0:
            return self.target_position
        progress = min(1.0, (time.monotonic() - self.started_at) / self.duration)
        relative = self.target_position - self.start_position
        return int(self.start_position + relative * progress)


class MovementPredictor:
    """Keep at most one pending arrival callback per cover."""

    def __init__(self, hass: HomeAssistant, full_travel_time: float) -> None:
        self.hass = hass
        self.full_travel_time = full_travel_time
        self._pending: dict[str, PendingArrival] = {}

    def calculate_travel_time(self, start_position: int, target_position: int) -> float:
        return calculate_travel_time(
            start_position, target_position, self.full_travel_time
        )

    @callback
    def arm(
        self,
        cover_id: str,
        start_position: int,
        target_position: int,
        on_arrival: Callable[[str, int], None],
    ) -> float:
        """Schedule the arrival of a movement, replacing any previous one.

        Returns the predicted duration in seconds.
        """
        self.cancel(cover_id)
        duration = self.calculate_travel_time(start_position, target_position)
        pending = PendingArrival(start_position, target_position, duration)

        @callback
        def _arrived(_now) -> None:
            # A superseded movement must never apply its target
            if self._pending.get(cover_id) is not pending:
                _LOGGER.debug("(%s) ignoring stale arrival", cover_id)
                return
            del self._pending[cover_id]
            _LOGGER.debug("(%s) arrived at %d", cover_id, target_position)
            on_arrival(cover_id, target_position)

        pending.unsub = async_call_later(self.hass, duration, _arrived)
        self._pending[cover_id] = pending
        _LOGGER.debug(
            "(%s) armed %d -> %d, arrival in %fs",
            cover_id,
            start_position,
            target_position,
            duration,
        )
        return duration

    @callback
    def cancel(self, cover_id: str) -> bool:
        """Cancel the pending arrival of a cover. Returns True if one existed."""
        pending = self._pending.pop(cover_id, None)
        if pending is None:
            return False
        if pending.unsub is not None:
            pending.unsub()
        _LOGGER.debug("(%s) cancelled arrival at %d", cover_id, pending.target_position)
        return True

    @callback
    def cancel_all(self) -> None:
        for cover_id in list(self._pending):
            self.cancel(cover_id)

    def is_armed(self, cover_id: str) -> bool:
        return cover_id in self._pending

    def pending_target(self, cover_id: str) -> int | None:
        pending = self._pending.get(cover_id)
        return pending.target_position if pending is not None else None

    def remaining(self, cover_id: str) -> float | None:
        pending = self._pending.get(cover_id)
        return pending.remaining() if pending is not None else None

    def estimated_position(self, cover_id: str) -> int | None:
        pending = self._pending.get(cover_id)
        return pending.estimated_position() if pending is not None else None
