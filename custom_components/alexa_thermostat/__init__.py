"""The Alexa Thermostat integration."""
from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryAuthFailed, ConfigEntryNotReady
from homeassistant.helpers import aiohttp_client

from .api import AlexaApiClient, AlexaAuthError, AlexaError
from .cache import AlexaStateCache
from .const import (
    CONF_AMAZON_DOMAIN,
    CONF_COOKIE,
    CONF_SCAN_INTERVAL,
    DEFAULT_AMAZON_DOMAIN,
    DEFAULT_SCAN_INTERVAL,
    DOMAIN,
)
from .coordinator import AlexaThermostatCoordinator
from .data import AlexaRuntimeData
from .models import parse_entities

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [Platform.CLIMATE]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Alexa Thermostat from a config entry."""
    session = aiohttp_client.async_get_clientsession(hass)

    client = AlexaApiClient(
        session=session,
        cookie=entry.data[CONF_COOKIE],
        amazon_domain=entry.data.get(CONF_AMAZON_DOMAIN, DEFAULT_AMAZON_DOMAIN),
    )

    try:
        await client.async_validate()
        entities = await client.async_get_entities()
    except AlexaAuthError as err:
        raise ConfigEntryAuthFailed(f"Alexa rejected the session cookie: {err}") from err
    except AlexaError as err:
        raise ConfigEntryNotReady(f"Failed to reach Alexa: {err}") from err

    devices = tuple(device for device in parse_entities(entities) if device.is_thermostat)
    _LOGGER.debug("Discovered %s Alexa thermostat(s)", len(devices))

    cache = AlexaStateCache(client)
    coordinator = AlexaThermostatCoordinator(
        hass,
        config_entry=entry,
        client=client,
        cache=cache,
        devices=devices,
        scan_interval_seconds=entry.options.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
    )

    await coordinator.async_config_entry_first_refresh()

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = AlexaRuntimeData(
        client=client,
        cache=cache,
        coordinator=coordinator,
    )

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    entry.async_on_unload(entry.add_update_listener(async_update_options))

    return True


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Update options."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        hass.data[DOMAIN].pop(entry.entry_id, None)

    return unload_ok
