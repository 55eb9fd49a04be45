"""Shared fixtures for smart_hub tests."""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from custom_components.smart_hub.controller import (
    CoverController,
    CoverRecord,
    SafetyLock,
)
from custom_components.smart_hub.movement_predictor import MovementPredictor
from custom_components.smart_hub.position_store import PositionStore

TRAVEL_TIME = 20.0


class FakeTimer:
    """Stand-in for a handle returned by async_call_later."""

    def __init__(self, delay, action):
        self.delay = delay
        self.action = action
        self.cancelled = False
        self.fired = 0

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Run the callback like the event loop would, unless cancelled."""
        if not self.cancelled:
            self.force_fire()

    def force_fire(self):
        """Run the callback even if cancelled (a callback already queued)."""
        self.fired += 1
        self.action(None)


@pytest.fixture
def timers():
    """Replace async_call_later in the predictor with recorded FakeTimers."""
    scheduled = []

    def _call_later(hass, delay, action):
        timer = FakeTimer(delay, action)
        scheduled.append(timer)
        return timer.cancel

    with patch(
        "custom_components.smart_hub.movement_predictor.async_call_later",
        side_effect=_call_later,
    ):
        yield scheduled


@pytest.fixture
def make_hass():
    """Return a factory that creates a minimal mock HA instance."""

    def _make():
        hass = MagicMock()
        hass.services.async_call = AsyncMock()
        hass.async_create_task = lambda coro: asyncio.ensure_future(coro)
        return hass

    return _make


@pytest.fixture
def make_api():
    """Return a factory for a mocked ShellyCoverApi."""

    def _make(host="192.168.1.10", position=0):
        api = MagicMock()
        api.host = host
        api.go_to_position = AsyncMock()
        api.stop = AsyncMock()
        api.get_position = AsyncMock(return_value=position)
        return api

    return _make


@pytest.fixture
def make_store():
    """Return a factory for a PositionStore backed by a mocked HA Store."""

    def _make(cover_ids, stored=None):
        backend = MagicMock()
        backend.async_load = AsyncMock(return_value=stored)
        backend.async_delay_save = MagicMock()
        store = PositionStore(backend, cover_ids)
        store.backend = backend
        return store

    return _make


@pytest.fixture
def make_controller(make_hass, make_api, make_store, timers):
    """Return a factory for a CoverController wired to mocks.

    Covers are named by the ids passed in; positions are preset directly
    on the store.
    """

    def _make(positions=None, locked=False, travel_time=TRAVEL_TIME):
        positions = positions or {"A": 0}
        hass = make_hass()
        records = [
            CoverRecord(cover_id=cover_id, name=cover_id, api=make_api())
            for cover_id in positions
        ]
        store = make_store(list(positions))
        for cover_id, position in positions.items():
            store._positions[cover_id] = position
        controller = CoverController(
            hass,
            records,
            store,
            MovementPredictor(hass, travel_time),
            SafetyLock(locked=locked),
        )
        return controller

    return _make
