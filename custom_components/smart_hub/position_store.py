"""Durable last-known position per cover."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from homeassistant.core import callback
from homeassistant.helpers.storage import Store

from .const import POSITION_CLOSED
from .exceptions import InvalidCover
from .helpers import clamp_position

_LOGGER = logging.getLogger(__name__)

# Written on the next loop iteration after every change
SAVE_DELAY = 0


class PositionStore:
    """Hold the percentage-open value of every configured cover.

    Position convention: 0 = fully closed, 100 = fully open. Covers without a
    stored value start closed.
    """

    def __init__(self, store: Store, cover_ids: Iterable[str]) -> None:
        self._store = store
        self._positions: dict[str, int] = {
            cover_id: POSITION_CLOSED for cover_id in cover_ids
        }

    async def async_load_all(self) -> dict[str, int]:
        """Load stored positions for the configured covers."""
        data = await self._store.async_load()
        if isinstance(data, dict):
            for cover_id in self._positions:
                stored = data.get(cover_id)
                if stored is None:
                    continue
                try:
                    self._positions[cover_id] = clamp_position(stored)
                except (TypeError, ValueError):
                    _LOGGER.warning(
                        "Ignoring invalid stored position %r for %s", stored, cover_id
                    )
        _LOGGER.debug("Loaded positions: %s", self._positions)
        return dict(self._positions)

    def get(self, cover_id: str) -> int:
        """Return the last known position of a cover."""
        try:
            return self._positions[cover_id]
        except KeyError:
            raise InvalidCover(cover_id) from None

    @callback
    def set(self, cover_id: str, position) -> int:
        """Record a position and persist it. Returns the clamped value."""
        if cover_id not in self._positions:
            raise InvalidCover(cover_id)
        position = clamp_position(position)
        if self._positions[cover_id] != position:
            self._positions[cover_id] = position
            self._store.async_delay_save(self._data_to_save, SAVE_DELAY)
        return position

    def as_dict(self) -> dict[str, int]:
        return dict(self._positions)

    @callback
    def _data_to_save(self) -> dict[str, int]:
        return dict(self._positions)
