"""Config flow for the Smart Hub covers integration."""

from __future__ import annotations

from typing import Any

import homeassistant.helpers.config_validation as cv
import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.const import CONF_HOST, CONF_NAME
from homeassistant.helpers.selector import (
    BooleanSelector,
    NumberSelector,
    NumberSelectorConfig,
    NumberSelectorMode,
    TextSelector,
)

from .const import (
    CONF_ADD_ANOTHER,
    CONF_COVER_ID,
    CONF_COVERS,
    CONF_POLL_INTERVAL,
    CONF_POLL_TIMEOUT,
    CONF_TRAVEL_TIME,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_POLL_TIMEOUT,
    DEFAULT_TRAVEL_TIME,
    DOMAIN,
)

DEFAULT_TITLE = "Smart Hub"

TRAVEL_TIME_SELECTOR = NumberSelector(
    NumberSelectorConfig(min=0, max=600, step=0.1, mode=NumberSelectorMode.BOX)
)

POLL_INTERVAL_SELECTOR = NumberSelector(
    NumberSelectorConfig(min=1, max=3600, step=1, mode=NumberSelectorMode.BOX)
)

POLL_TIMEOUT_SELECTOR = NumberSelector(
    NumberSelectorConfig(min=0.1, max=30, step=0.1, mode=NumberSelectorMode.BOX)
)

SETTINGS_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_NAME, default=DEFAULT_TITLE): TextSelector(),
        vol.Required(
            CONF_TRAVEL_TIME, default=DEFAULT_TRAVEL_TIME
        ): TRAVEL_TIME_SELECTOR,
        vol.Required(
            CONF_POLL_INTERVAL, default=DEFAULT_POLL_INTERVAL
        ): POLL_INTERVAL_SELECTOR,
        vol.Required(
            CONF_POLL_TIMEOUT, default=DEFAULT_POLL_TIMEOUT
        ): POLL_TIMEOUT_SELECTOR,
    }
)

COVER_STEP_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_COVER_ID): TextSelector(),
        vol.Required(CONF_HOST): TextSelector(),
        vol.Optional(CONF_NAME): TextSelector(),
        vol.Optional(CONF_ADD_ANOTHER, default=False): BooleanSelector(),
    }
)


def _validate_cover(
    user_input: dict[str, Any], covers: dict[str, dict[str, str]]
) -> dict[str, str]:
    """Validate one cover definition against those already entered."""
    cover_id = user_input[CONF_COVER_ID].strip()
    try:
        cv.slug(cover_id)
    except vol.Invalid:
        return {CONF_COVER_ID: "invalid_cover_id"}
    if cover_id in covers:
        return {CONF_COVER_ID: "duplicate_cover"}
    if not user_input[CONF_HOST].strip():
        return {CONF_HOST: "invalid_host"}
    return {}


class SmartHubConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Smart Hub covers."""

    VERSION = 1

    def __init__(self) -> None:
        """Initialize the config flow."""
        self._title: str = DEFAULT_TITLE
        self._settings: dict[str, Any] = {}
        self._covers: dict[str, dict[str, str]] = {}

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Step 1: Name and timing settings."""
        if user_input is not None:
            self._title = user_input[CONF_NAME]
            self._settings = {
                CONF_TRAVEL_TIME: user_input[CONF_TRAVEL_TIME],
                CONF_POLL_INTERVAL: int(user_input[CONF_POLL_INTERVAL]),
                CONF_POLL_TIMEOUT: user_input[CONF_POLL_TIMEOUT],
            }
            return await self.async_step_cover()

        return self.async_show_form(step_id="user", data_schema=SETTINGS_SCHEMA)

    async def async_step_cover(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Step 2: Add a cover; repeated while "add another" is ticked."""
        errors: dict[str, str] = {}
        if user_input is not None:
            errors = _validate_cover(user_input, self._covers)
            if not errors:
                cover = {CONF_HOST: user_input[CONF_HOST].strip()}
                if user_input.get(CONF_NAME):
                    cover[CONF_NAME] = user_input[CONF_NAME]
                self._covers[user_input[CONF_COVER_ID].strip()] = cover

                if not user_input.get(CONF_ADD_ANOTHER):
                    return self.async_create_entry(
                        title=self._title,
                        data={},
                        options={**self._settings, CONF_COVERS: self._covers},
                    )
                user_input = None

        schema = COVER_STEP_SCHEMA
        if user_input is not None:
            schema = self.add_suggested_values_to_schema(schema, user_input)
        return self.async_show_form(
            step_id="cover",
            data_schema=schema,
            errors=errors,
            description_placeholders={"count": str(len(self._covers))},
        )
