"""Mappers between Alexa capability values and Home Assistant climate values."""

from __future__ import annotations

from typing import Any

from homeassistant.components.climate import HVACMode
from homeassistant.const import UnitOfTemperature

from .const import (
    CELSIUS_TO_FAHRENHEIT_FACTOR,
    FAHRENHEIT_OFFSET,
    FAHRENHEIT_TO_CELSIUS_FACTOR,
    KELVIN_OFFSET,
    MODE_AUTO,
    MODE_COOL,
    MODE_EM_HEAT,
    MODE_HEAT,
    MODE_OFF,
    SCALE_CELSIUS,
    SCALE_FAHRENHEIT,
    SCALE_KELVIN,
    TEMPERATURE_PRECISION,
)
from .models import Temperature, is_temperature

ALEXA_TO_HVAC_MODE: dict[str, HVACMode] = {
    MODE_AUTO: HVACMode.AUTO,
    MODE_HEAT: HVACMode.HEAT,
    MODE_EM_HEAT: HVACMode.HEAT,
    MODE_COOL: HVACMode.COOL,
    MODE_OFF: HVACMode.OFF,
}

ALEXA_TO_LOCAL_UNITS: dict[str, UnitOfTemperature] = {
    SCALE_CELSIUS: UnitOfTemperature.CELSIUS,
    SCALE_FAHRENHEIT: UnitOfTemperature.FAHRENHEIT,
}


def map_alexa_temp_to_local(value: Any) -> float | None:
    """Convert an Alexa temperature to Celsius, or None for an unknown scale."""
    if not is_temperature(value):
        return None

    if value.scale == SCALE_CELSIUS:
        celsius = value.value
    elif value.scale == SCALE_FAHRENHEIT:
        celsius = (value.value - FAHRENHEIT_OFFSET) * FAHRENHEIT_TO_CELSIUS_FACTOR
    elif value.scale == SCALE_KELVIN:
        celsius = value.value - KELVIN_OFFSET
    else:
        return None

    return round(celsius, TEMPERATURE_PRECISION)


def map_local_temp_to_alexa(value: float, scale: str) -> float:
    """Convert a Celsius value into the given Alexa scale."""
    scale = scale.upper()
    if scale == SCALE_FAHRENHEIT:
        converted = value * CELSIUS_TO_FAHRENHEIT_FACTOR + FAHRENHEIT_OFFSET
    elif scale == SCALE_KELVIN:
        converted = value + KELVIN_OFFSET
    else:
        converted = value
    return round(converted, TEMPERATURE_PRECISION)


def map_alexa_temp_units_to_local(value: Any) -> UnitOfTemperature | None:
    """Return the display unit for an Alexa temperature scale."""
    if not isinstance(value, Temperature):
        return None
    return ALEXA_TO_LOCAL_UNITS.get(value.scale)


def map_alexa_mode_to_local(value: Any) -> HVACMode:
    """Map an Alexa thermostat mode onto OFF/HEAT/COOL/AUTO.

    Modes without a local counterpart (ECO, CUSTOM, anything unknown) read as OFF.
    """
    if not isinstance(value, str):
        return HVACMode.OFF
    return ALEXA_TO_HVAC_MODE.get(value.strip().upper(), HVACMode.OFF)


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Force a value into `[minimum, maximum]`."""
    return max(minimum, min(maximum, value))


def format_number(value: float) -> str:
    """Format a number for control request parameters."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
