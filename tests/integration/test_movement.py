"""Integration tests for cover movement through HA services."""

from __future__ import annotations

from datetime import timedelta

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.util import dt as dt_util
from pytest_homeassistant_custom_component.common import async_fire_time_changed

from .conftest import DOMAIN, KITCHEN_HOST, LIVING_ROOM_HOST


def _rpc_payloads(aioclient_mock, host):
    """Return JSON bodies POSTed to a device."""
    return [
        data
        for method, url, data, _headers in aioclient_mock.mock_calls
        if method.upper() == "POST" and url.host == host
    ]


async def _unlock(hass: HomeAssistant):
    await hass.services.async_call(
        "switch", "turn_off", {"entity_id": "switch.safety_lock"}, blocking=True
    )


async def test_locked_hub_rejects_commands(hass: HomeAssistant, setup_hub, mock_devices):
    """Commands fail while the safety lock is on and nothing is sent."""
    with pytest.raises(HomeAssistantError):
        await hass.services.async_call(
            "cover", "open_cover", {"entity_id": "cover.living_room"}, blocking=True
        )
    await hass.async_block_till_done()

    state = hass.states.get("cover.living_room")
    assert state.state == "closed"
    assert _rpc_payloads(mock_devices, LIVING_ROOM_HOST) == []


async def test_open_is_optimistic_then_arrives(
    hass: HomeAssistant, setup_hub, mock_devices
):
    """Open shows the target immediately and returns to idle after travel."""
    await _unlock(hass)
    await hass.services.async_call(
        "cover", "open_cover", {"entity_id": "cover.living_room"}, blocking=True
    )
    await hass.async_block_till_done()

    state = hass.states.get("cover.living_room")
    assert state.state == "opening"
    assert state.attributes["current_position"] == 100
    assert state.attributes["movement_state"] == "opening"
    assert state.attributes["indicated_direction"] == "opening"
    assert _rpc_payloads(mock_devices, LIVING_ROOM_HOST) == [
        {"id": 1, "method": "Cover.GoToPosition", "params": {"id": 0, "pos": 100}}
    ]

    async_fire_time_changed(hass, dt_util.utcnow() + timedelta(seconds=21))
    await hass.async_block_till_done()

    state = hass.states.get("cover.living_room")
    assert state.state == "open"
    assert state.attributes["movement_state"] == "idle"
    assert state.attributes["open_enabled"] is False
    assert state.attributes["close_enabled"] is True


async def test_set_position_and_stop(hass: HomeAssistant, setup_hub, mock_devices):
    await _unlock(hass)
    await hass.services.async_call(
        "cover",
        "set_cover_position",
        {"entity_id": "cover.kitchen", "position": 40},
        blocking=True,
    )
    await hass.services.async_call(
        "cover", "stop_cover", {"entity_id": "cover.kitchen"}, blocking=True
    )
    await hass.async_block_till_done()

    state = hass.states.get("cover.kitchen")
    assert state.state == "open"
    assert state.attributes["current_position"] == 40
    assert state.attributes["movement_state"] == "idle"
    methods = [p["method"] for p in _rpc_payloads(mock_devices, KITCHEN_HOST)]
    assert methods == ["Cover.GoToPosition", "Cover.Stop"]


async def test_issue_command_service_all(hass: HomeAssistant, setup_hub, mock_devices):
    """The issue_command service can address every cover at once."""
    await _unlock(hass)
    await hass.services.async_call(
        DOMAIN, "issue_command", {"cover": "all", "action": "open"}, blocking=True
    )
    await hass.async_block_till_done()

    for entity_id in ("cover.living_room", "cover.kitchen"):
        assert hass.states.get(entity_id).state == "opening"


async def test_issue_command_service_percentage(
    hass: HomeAssistant, setup_hub, mock_devices
):
    await _unlock(hass)
    await hass.services.async_call(
        DOMAIN, "issue_command", {"cover": "kitchen", "action": "25"}, blocking=True
    )
    await hass.async_block_till_done()

    state = hass.states.get("cover.kitchen")
    assert state.attributes["current_position"] == 25
    assert state.state == "opening"


async def test_issue_command_unknown_cover(hass: HomeAssistant, setup_hub):
    await _unlock(hass)
    with pytest.raises(HomeAssistantError, match="Unknown cover"):
        await hass.services.async_call(
            DOMAIN, "issue_command", {"cover": "garage", "action": "open"}, blocking=True
        )
