"""Smart Hub covers integration."""

import logging
from datetime import timedelta

import homeassistant.helpers.config_validation as cv
import voluptuous as vol
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_NAME, Platform
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ConfigEntryError
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.storage import Store
from homeassistant.helpers.typing import ConfigType

from .api import ShellyCoverApi
from .const import (
    ALL_COVERS,
    ATTR_ACTION,
    ATTR_COVER,
    CONF_COVERS,
    CONF_POLL_INTERVAL,
    CONF_POLL_TIMEOUT,
    CONF_TRAVEL_TIME,
    DOMAIN,
    ENTRY_SCHEMA,
    SERVICE_ISSUE_COMMAND,
    STORAGE_KEY,
    STORAGE_VERSION,
)
from .controller import (
    CoverCommand,
    CoverController,
    CoverRecord,
    SafetyLock,
    SmartHubData,
)
from .helpers import iter_controllers, resolve_controller
from .movement_predictor import MovementPredictor
from .position_store import PositionStore
from .reconciler import HardwareReconciler

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [Platform.COVER, Platform.SWITCH]

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)

ISSUE_COMMAND_SCHEMA = vol.Schema(
    {
        vol.Required(ATTR_COVER): cv.string,
        vol.Required(ATTR_ACTION): CoverCommand.parse,
    }
)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Register the command service used by voice and automation sources."""

    async def async_issue_command(call: ServiceCall) -> None:
        cover_id: str = call.data[ATTR_COVER]
        command: CoverCommand = call.data[ATTR_ACTION]
        if cover_id == ALL_COVERS:
            for controller in iter_controllers(hass):
                for target_id in controller.cover_ids:
                    controller.issue(target_id, command)
            return
        resolve_controller(hass, cover_id).issue(cover_id, command)

    hass.services.async_register(
        DOMAIN, SERVICE_ISSUE_COMMAND, async_issue_command, schema=ISSUE_COMMAND_SCHEMA
    )
    return True


def _build_controller(
    hass: HomeAssistant, entry: ConfigEntry, options: dict
) -> CoverController:
    """Create the controller and its collaborators from validated options."""
    session = async_get_clientsession(hass)
    records = [
        CoverRecord(
            cover_id=cover_id,
            name=cover.get(CONF_NAME) or cover_id,
            api=ShellyCoverApi(session, cover[CONF_HOST], options[CONF_POLL_TIMEOUT]),
        )
        for cover_id, cover in options[CONF_COVERS].items()
    ]
    store = PositionStore(
        Store(hass, STORAGE_VERSION, f"{STORAGE_KEY}.{entry.entry_id}"),
        [record.cover_id for record in records],
    )
    predictor = MovementPredictor(hass, options[CONF_TRAVEL_TIME])
    return CoverController(hass, records, store, predictor, SafetyLock(locked=True))


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Smart Hub covers from a config entry."""
    try:
        options = ENTRY_SCHEMA(dict(entry.options))
    except vol.Invalid as err:
        raise ConfigEntryError(f"Invalid smart_hub configuration: {err}") from err

    controller = _build_controller(hass, entry, options)
    await controller.store.async_load_all()
    _LOGGER.debug(
        "Setting up %s with covers %s", entry.entry_id, controller.cover_ids
    )

    reconciler = HardwareReconciler(
        hass, controller, timedelta(seconds=options[CONF_POLL_INTERVAL])
    )
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = SmartHubData(
        controller, reconciler
    )

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    # Initial sync runs regardless of the safety lock; interval polls do not
    entry.async_create_background_task(
        hass, reconciler.async_poll_all(), f"{DOMAIN}_initial_sync_{entry.entry_id}"
    )
    reconciler.start()
    entry.async_on_unload(reconciler.stop)
    entry.async_on_unload(controller.async_shutdown)

    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unloaded = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unloaded:
        hass.data[DOMAIN].pop(entry.entry_id, None)
    return unloaded
