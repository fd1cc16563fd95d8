"""Diagnostics support for Alexa Thermostat."""
from __future__ import annotations

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_COOKIE, DOMAIN
from .data import AlexaRuntimeData

REDACTED = "**REDACTED**"


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    runtime: AlexaRuntimeData = hass.data[DOMAIN][entry.entry_id]
    coordinator = runtime.coordinator

    return {
        "entry": {
            "title": entry.title,
            "version": entry.version,
            "data": _redact_data(dict(entry.data)),
        },
        "devices": [
            {
                "display_name": device.display_name,
                "category": device.category,
                "supported_operations": list(device.supported_operations),
            }
            for device in coordinator.devices.values()
        ],
        "cache": redact_cache(runtime.cache.as_dict()),
    }


def redact_cache(cache_dump: dict[str, Any]) -> dict[str, Any]:
    """Replace device ids in a cache dump with stable placeholders."""
    return {
        f"device_{index}": snapshot
        for index, snapshot in enumerate(cache_dump.values())
    }


def _redact_data(data: dict[str, Any]) -> dict[str, Any]:
    """Redact sensitive information from data."""
    redacted = {}

    for key, value in data.items():
        if key == CONF_COOKIE:
            redacted[key] = REDACTED
        elif isinstance(value, dict):
            redacted[key] = _redact_data(value)
        else:
            redacted[key] = value

    return redacted
