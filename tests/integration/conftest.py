"""Integration test fixtures for smart_hub.

Uses pytest-homeassistant-custom-component for a real HA instance.
aioclient_mock stands in for the Shelly devices on the network.
"""

from __future__ import annotations

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry
from pytest_homeassistant_custom_component.test_util.aiohttp import (
    AiohttpClientMocker,
)

DOMAIN = "smart_hub"

LIVING_ROOM_HOST = "192.168.1.20"
KITCHEN_HOST = "192.168.1.21"


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable custom integrations for all tests in this directory."""
    return


def mock_device(
    aioclient_mock: AiohttpClientMocker,
    host: str,
    position: int | None = 0,
    status: int = 200,
) -> None:
    """Register RPC endpoints of one Shelly cover."""
    aioclient_mock.post(f"http://{host}/rpc", json={"id": 1, "result": None})
    payload = {"id": 0, "state": "stopped"}
    if position is not None:
        payload["current_pos"] = position
    aioclient_mock.get(
        f"http://{host}/rpc/Cover.GetStatus", json=payload, status=status
    )


@pytest.fixture
def base_options():
    """Return options for two covers."""
    return {
        "travel_time": 20.0,
        "poll_interval": 30,
        "poll_timeout": 2.0,
        "covers": {
            "living_room": {"host": LIVING_ROOM_HOST, "name": "Living room"},
            "kitchen": {"host": KITCHEN_HOST, "name": "Kitchen"},
        },
    }


@pytest.fixture
def mock_devices(aioclient_mock: AiohttpClientMocker):
    """Both devices reachable, reporting closed."""
    mock_device(aioclient_mock, LIVING_ROOM_HOST, 0)
    mock_device(aioclient_mock, KITCHEN_HOST, 0)
    return aioclient_mock


@pytest.fixture
async def setup_hub(hass: HomeAssistant, mock_devices, base_options):
    """Create and load a smart_hub config entry.

    Yields the entry, then unloads it on teardown to cancel the poll
    interval and any pending arrival timers.
    """
    entry = MockConfigEntry(
        domain=DOMAIN,
        version=1,
        title="Smart Hub",
        data={},
        options=base_options,
    )
    entry.add_to_hass(hass)
    await hass.config_entries.async_setup(entry.entry_id)
    await hass.async_block_till_done()

    state = hass.states.get("cover.living_room")
    assert state is not None, "Cover entity was not created"

    yield entry

    await hass.config_entries.async_unload(entry.entry_id)
    await hass.async_block_till_done()
