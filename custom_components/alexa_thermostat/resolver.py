"""Thermostat mode guards and derived values computed from cached setpoints."""

from __future__ import annotations

from .cache import PointCache
from .const import (
    MODE_AUTO,
    NAME_LOWER_SETPOINT,
    NAME_THERMOSTAT_MODE,
    NAME_UPPER_SETPOINT,
    NAMESPACE_THERMOSTAT,
)
from .mapper import map_alexa_temp_to_local


def _cached_mode(cache: PointCache, device_id: str) -> object:
    state = cache.get(device_id, NAMESPACE_THERMOSTAT, NAME_THERMOSTAT_MODE)
    if state is None:
        return None
    if isinstance(state.value, str):
        return state.value.strip().upper()
    return state.value


def is_in_auto_or_invalid_mode(cache: PointCache, device_id: str) -> bool:
    """Return True when the mode is AUTO, missing or not a mode string.

    Gates direct target temperature writes and reads.
    """
    mode = _cached_mode(cache, device_id)
    if not isinstance(mode, str):
        return True
    return mode == MODE_AUTO


def is_in_auto_mode(cache: PointCache, device_id: str) -> bool:
    """Return True only for a cached AUTO mode."""
    return _cached_mode(cache, device_id) == MODE_AUTO


def derive_auto_target(cache: PointCache, device_id: str) -> float | None:
    """Return the midpoint of the cached heat and cool setpoints in Celsius."""
    heat = cache.get(device_id, NAMESPACE_THERMOSTAT, NAME_LOWER_SETPOINT)
    cool = cache.get(device_id, NAMESPACE_THERMOSTAT, NAME_UPPER_SETPOINT)
    if heat is None or cool is None:
        return None

    heat_celsius = map_alexa_temp_to_local(heat.value)
    cool_celsius = map_alexa_temp_to_local(cool.value)
    if heat_celsius is None or cool_celsius is None:
        return None

    return (heat_celsius + cool_celsius) / 2
