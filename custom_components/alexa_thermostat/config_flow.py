"""Config flow for Alexa Thermostat integration."""
from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import HomeAssistant, callback
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers import aiohttp_client

from .api import AlexaApiClient, AlexaAuthError, AlexaError
from .const import (
    CONF_AMAZON_DOMAIN,
    CONF_COOKIE,
    CONF_ENTRY_TITLE_FALLBACK,
    CONF_SCAN_INTERVAL,
    DEFAULT_AMAZON_DOMAIN,
    DEFAULT_SCAN_INTERVAL,
    DOMAIN,
    MAX_SCAN_INTERVAL,
    MIN_SCAN_INTERVAL,
)

_LOGGER = logging.getLogger(__name__)

STEP_USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_AMAZON_DOMAIN, default=DEFAULT_AMAZON_DOMAIN): str,
        vol.Required(CONF_COOKIE): str,
    }
)


async def validate_input(hass: HomeAssistant, data: dict[str, Any]) -> dict[str, Any]:
    """Validate the user input allows us to connect.

    Data has the keys from STEP_USER_DATA_SCHEMA with values provided by the user.
    """
    session = aiohttp_client.async_get_clientsession(hass)
    client = AlexaApiClient(
        session=session,
        cookie=data[CONF_COOKIE],
        amazon_domain=data[CONF_AMAZON_DOMAIN],
    )

    authentication = await client.async_validate()

    customer_id = str(authentication.get("customerId") or "").strip()
    title = str(authentication.get("customerName") or "").strip() or CONF_ENTRY_TITLE_FALLBACK

    return {"title": title, "customer_id": customer_id}


class AlexaThermostatConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Alexa Thermostat."""

    VERSION = 1

    async def _async_validate(
        self, user_input: dict[str, Any], errors: dict[str, str]
    ) -> dict[str, Any] | None:
        """Validate input, filling errors on failure."""
        try:
            return await validate_input(self.hass, user_input)
        except AlexaAuthError:
            errors["base"] = "invalid_auth"
        except AlexaError:
            errors["base"] = "cannot_connect"
        except Exception:  # pylint: disable=broad-except
            _LOGGER.exception("Unexpected exception")
            errors["base"] = "unknown"
        return None

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}

        if user_input is not None:
            info = await self._async_validate(user_input, errors)
            if info is not None:
                # One entry per Amazon account
                if info["customer_id"]:
                    await self.async_set_unique_id(info["customer_id"])
                    self._abort_if_unique_id_configured()

                return self.async_create_entry(title=info["title"], data=user_input)

        return self.async_show_form(
            step_id="user", data_schema=STEP_USER_DATA_SCHEMA, errors=errors
        )

    async def async_step_reauth(self, entry_data: Mapping[str, Any]) -> FlowResult:
        """Start reauthentication after the cookie was rejected."""
        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Ask for a fresh session cookie."""
        errors: dict[str, str] = {}
        entry = self._get_reauth_entry()

        if user_input is not None:
            data = {**entry.data, CONF_COOKIE: user_input[CONF_COOKIE]}
            if await self._async_validate(data, errors) is not None:
                return self.async_update_reload_and_abort(
                    entry, data_updates={CONF_COOKIE: user_input[CONF_COOKIE]}
                )

        return self.async_show_form(
            step_id="reauth_confirm",
            data_schema=vol.Schema({vol.Required(CONF_COOKIE): str}),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> AlexaThermostatOptionsFlow:
        """Get the options flow for this handler."""
        return AlexaThermostatOptionsFlow()


class AlexaThermostatOptionsFlow(config_entries.OptionsFlow):
    """Handle options flow for Alexa Thermostat."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Manage the options."""
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_SCAN_INTERVAL,
                        default=self.config_entry.options.get(
                            CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL
                        ),
                    ): vol.All(
                        vol.Coerce(int),
                        vol.Range(min=MIN_SCAN_INTERVAL, max=MAX_SCAN_INTERVAL),
                    ),
                }
            ),
        )
