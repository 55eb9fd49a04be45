"""Periodic correction of believed cover positions from device polls."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers.event import async_track_time_interval

from .controller import CoverController
from .exceptions import DeviceUnreachable

_LOGGER = logging.getLogger(__name__)


class HardwareReconciler:
    """Poll every cover device and overwrite positions of idle covers.

    Devices are queried in parallel and independently: a slow or offline
    device only costs its own request timeout and never blocks the others.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        controller: CoverController,
        interval: timedelta,
    ) -> None:
        self.hass = hass
        self.controller = controller
        self.interval = interval
        self._poll_lock = asyncio.Lock()
        self._unsub_interval: CALLBACK_TYPE | None = None

    @property
    def is_running(self) -> bool:
        return self._poll_lock.locked()

    async def async_poll_all(self) -> dict[str, int]:
        """Poll all devices once.

        Returns the positions that were applied. A call made while another
        poll is still running is skipped.
        """
        if self._poll_lock.locked():
            _LOGGER.debug("async_poll_all :: previous poll still running, skipping")
            return {}

        async with self._poll_lock:
            cover_ids = self.controller.cover_ids
            results = await asyncio.gather(
                *(self._async_poll_cover(cover_id) for cover_id in cover_ids),
                return_exceptions=True,
            )

        applied: dict[str, int] = {}
        for cover_id, result in zip(cover_ids, results):
            if isinstance(result, BaseException):
                _LOGGER.error(
                    "Unexpected error polling %s: %s", cover_id, result, exc_info=result
                )
            elif result is not None:
                applied[cover_id] = result
        _LOGGER.debug("async_poll_all :: applied %s", applied)
        return applied

    async def _async_poll_cover(self, cover_id: str) -> int | None:
        record = self.controller.record(cover_id)
        try:
            position = await record.api.get_position()
        except DeviceUnreachable as err:
            _LOGGER.debug("Sync failed for %s (%s): %s", cover_id, record.api.host, err)
            self.controller.mark_unreachable(cover_id)
            return None
        if position is None:
            _LOGGER.debug("(%s) device reported no position", cover_id)
            return None
        if not self.controller.apply_reported_position(cover_id, position):
            return None
        return self.controller.position(cover_id)

    @callback
    def start(self) -> None:
        """Start polling on the configured interval."""
        if self._unsub_interval is None:
            _LOGGER.debug("start :: polling every %s", self.interval)
            self._unsub_interval = async_track_time_interval(
                self.hass, self._async_interval_poll, self.interval
            )

    @callback
    def stop(self) -> None:
        """Stop interval polling."""
        if self._unsub_interval is not None:
            self._unsub_interval()
            self._unsub_interval = None

    async def _async_interval_poll(self, _now) -> None:
        if self.controller.locked:
            return
        await self.async_poll_all()
