"""Smoke test: verify integration loads and creates its entities."""

from homeassistant.core import HomeAssistant


async def test_integration_loads(hass: HomeAssistant, setup_hub):
    """Config entry loads and creates cover and safety lock entities."""
    for entity_id in ("cover.living_room", "cover.kitchen"):
        state = hass.states.get(entity_id)
        assert state is not None
        assert state.state == "closed"

    lock = hass.states.get("switch.safety_lock")
    assert lock is not None
    assert lock.state == "on"
