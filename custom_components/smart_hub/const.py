"""Constants for the smart_hub integration."""

import homeassistant.helpers.config_validation as cv
import voluptuous as vol
from homeassistant.const import CONF_HOST, CONF_NAME

DOMAIN = "smart_hub"

CONF_COVERS = "covers"
CONF_COVER_ID = "cover_id"
CONF_TRAVEL_TIME = "travel_time"
CONF_POLL_INTERVAL = "poll_interval"
CONF_POLL_TIMEOUT = "poll_timeout"
CONF_ADD_ANOTHER = "add_another"

DEFAULT_TRAVEL_TIME = 20.0
DEFAULT_POLL_INTERVAL = 30
DEFAULT_POLL_TIMEOUT = 2.0

POSITION_CLOSED = 0
POSITION_OPEN = 100
# Controls are treated as at their limit within this many percent
BOUNDARY_TOLERANCE = 2

STORAGE_KEY = "smart_hub.positions"
STORAGE_VERSION = 1

SERVICE_ISSUE_COMMAND = "issue_command"
ATTR_COVER = "cover"
ATTR_ACTION = "action"
ALL_COVERS = "all"

COVER_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_HOST): cv.string,
        vol.Optional(CONF_NAME): cv.string,
    }
)

ENTRY_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_TRAVEL_TIME, default=DEFAULT_TRAVEL_TIME): cv.positive_float,
        vol.Optional(CONF_POLL_INTERVAL, default=DEFAULT_POLL_INTERVAL): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
        vol.Optional(CONF_POLL_TIMEOUT, default=DEFAULT_POLL_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0.1)
        ),
        vol.Required(CONF_COVERS): vol.All(
            {cv.slug: COVER_SCHEMA}, vol.Length(min=1)
        ),
    },
    extra=vol.REMOVE_EXTRA,
)
