"""Translate between Alexa thermostat capability states and climate channels.

Every read fetches the device snapshot through the cache, maps the matching
entry and clamps it into the channel range. In AUTO mode the target
temperature is the midpoint of the heat and cool setpoints rather than the
reported `targetSetpoint`, and it is still returned from the cached setpoints
when the fetch fails.

Every write validates against the cached companion entries first, sends one
control request, and on success updates the cached entry it wrote so the next
read sees the new value until Alexa reports it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
import logging
from typing import Any, Protocol, TypeVar

from homeassistant.components.climate import HVACMode
from homeassistant.const import UnitOfTemperature
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError

from .api import AlexaError
from .cache import PointCache, SnapshotCache
from .const import (
    ACTION_SET_TARGET_TEMPERATURE,
    MAX_COOL_TEMP,
    MAX_HEAT_TEMP,
    MAX_TARGET_TEMP,
    MIN_COOL_TEMP,
    MIN_HEAT_TEMP,
    MIN_TARGET_TEMP,
    NAME_LOWER_SETPOINT,
    NAME_TARGET_SETPOINT,
    NAME_TEMPERATURE,
    NAME_THERMOSTAT_MODE,
    NAME_UPPER_SETPOINT,
    NAMESPACE_TEMPERATURE_SENSOR,
    NAMESPACE_THERMOSTAT,
    PARAM_LOWER_SCALE,
    PARAM_LOWER_VALUE,
    PARAM_TARGET_SCALE,
    PARAM_TARGET_VALUE,
    PARAM_UPPER_SCALE,
    PARAM_UPPER_VALUE,
)
from .mapper import (
    clamp,
    format_number,
    map_alexa_mode_to_local,
    map_alexa_temp_to_local,
    map_alexa_temp_units_to_local,
    map_local_temp_to_alexa,
)
from .models import CapabilityState, Temperature, ThermostatReading, find_state, is_number, is_temperature
from .resolver import derive_auto_target, is_in_auto_mode, is_in_auto_or_invalid_mode

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


class AlexaCommunicationError(HomeAssistantError):
    """Raised when the thermostat state cannot be read or written."""


class AlexaNotAllowedError(ServiceValidationError):
    """Raised when a threshold write lacks a valid paired setpoint."""


class AlexaInvalidValueError(ServiceValidationError):
    """Raised when a write receives a non-numeric value."""


class AlexaReadOnlyError(ServiceValidationError):
    """Raised on writes to channels that are only ever read."""


class CommandSink(Protocol):
    """Anything that can push a control request for a device."""

    async def async_set_device_state(
        self,
        device_id: str,
        action: str,
        params: Mapping[str, str],
    ) -> Any:
        ...


class ThermostatBridge:
    """Reads and writes the climate channels of one Alexa thermostat."""

    def __init__(
        self,
        *,
        device_id: str,
        cache: SnapshotCache,
        sink: CommandSink,
        name: str | None = None,
    ) -> None:
        self.device_id = device_id
        self.name = name or device_id
        self._cache = cache
        self._sink = sink

    def _communication_error(self, channel: str, cause: object) -> AlexaCommunicationError:
        _LOGGER.error("%s failed for %s (%s): %s", channel, self.name, self.device_id, cause)
        return AlexaCommunicationError(f"Alexa service unavailable for {self.name}")

    async def _async_lookup(
        self,
        namespace: str,
        name: str,
        mapper: Callable[[Any], _T | None],
    ) -> tuple[_T | None, AlexaError | None]:
        """Fetch the snapshot and map the first matching entry, returning any fetch error."""
        try:
            snapshot = await self._cache.async_fetch_snapshot(self.device_id)
        except AlexaError as err:
            return None, err

        state = find_state(snapshot, namespace, name)
        if state is None:
            return None, None
        return mapper(state.value), None

    async def _async_snapshot_value(
        self,
        channel: str,
        namespace: str,
        name: str,
        mapper: Callable[[Any], _T | None],
    ) -> _T | None:
        """Fetch the snapshot and map the first matching entry."""
        value, fetch_error = await self._async_lookup(namespace, name, mapper)
        if fetch_error is not None:
            raise self._communication_error(channel, fetch_error) from fetch_error
        return value

    def _require(self, channel: str, value: _T | None) -> _T:
        if value is None:
            raise self._communication_error(channel, "no valid state reported")
        _LOGGER.debug("%s result for %s: %s", channel, self.name, value)
        return value

    async def async_get_current_temperature(self) -> float:
        """Return the sensor temperature in Celsius (not clamped)."""
        channel = "Get current temperature"
        value = await self._async_snapshot_value(
            channel, NAMESPACE_TEMPERATURE_SENSOR, NAME_TEMPERATURE, map_alexa_temp_to_local
        )
        return self._require(channel, value)

    async def async_get_temperature_units(self) -> UnitOfTemperature:
        """Return the display unit reported by the temperature sensor."""
        channel = "Get temperature units"
        value = await self._async_snapshot_value(
            channel, NAMESPACE_TEMPERATURE_SENSOR, NAME_TEMPERATURE, map_alexa_temp_units_to_local
        )
        return self._require(channel, value)

    async def async_get_hvac_mode(self) -> HVACMode:
        """Return the thermostat mode."""
        channel = "Get thermostat mode"
        value = await self._async_snapshot_value(
            channel, NAMESPACE_THERMOSTAT, NAME_THERMOSTAT_MODE, map_alexa_mode_to_local
        )
        return self._require(channel, value)

    async def async_get_target_temperature(self) -> float:
        """Return the target temperature, derived from the setpoints in AUTO mode."""
        return await self._async_get_setpoint(
            "Get target temperature",
            NAME_TARGET_SETPOINT,
            is_in_auto_or_invalid_mode,
            MIN_TARGET_TEMP,
            MAX_TARGET_TEMP,
        )

    async def async_get_cool_threshold(self) -> float:
        """Return the cooling threshold temperature."""
        return await self._async_get_setpoint(
            "Get cooling temperature", NAME_UPPER_SETPOINT, is_in_auto_mode, MIN_COOL_TEMP, MAX_COOL_TEMP
        )

    async def async_get_heat_threshold(self) -> float:
        """Return the heating threshold temperature."""
        return await self._async_get_setpoint(
            "Get heating temperature", NAME_LOWER_SETPOINT, is_in_auto_mode, MIN_HEAT_TEMP, MAX_HEAT_TEMP
        )

    async def _async_get_setpoint(
        self,
        channel: str,
        setpoint_name: str,
        use_midpoint: Callable[[PointCache, str], bool],
        minimum: float,
        maximum: float,
    ) -> float:
        """Read a setpoint, preferring the cached midpoint when `use_midpoint` holds.

        A failed fetch only surfaces when no midpoint can be derived from the
        entries already cached.
        """
        value, fetch_error = await self._async_lookup(
            NAMESPACE_THERMOSTAT, setpoint_name, map_alexa_temp_to_local
        )

        if use_midpoint(self._cache, self.device_id):
            derived = derive_auto_target(self._cache, self.device_id)
            if derived is not None:
                _LOGGER.debug("%s result for %s (auto midpoint): %s", channel, self.name, derived)
                return clamp(derived, minimum, maximum)

        if fetch_error is not None:
            raise self._communication_error(channel, fetch_error) from fetch_error
        return clamp(self._require(channel, value), minimum, maximum)

    async def async_read_state(self) -> ThermostatReading:
        """Read every channel; a channel that cannot be read is None."""

        async def optional(read: Callable[[], Awaitable[_T]]) -> _T | None:
            try:
                return await read()
            except AlexaCommunicationError:
                return None

        return ThermostatReading(
            current_temperature=await optional(self.async_get_current_temperature),
            temperature_unit=await optional(self.async_get_temperature_units),
            hvac_mode=await optional(self.async_get_hvac_mode),
            target_temperature=await optional(self.async_get_target_temperature),
            cool_threshold=await optional(self.async_get_cool_threshold),
            heat_threshold=await optional(self.async_get_heat_threshold),
        )

    async def _async_send(self, channel: str, params: dict[str, str]) -> None:
        try:
            await self._sink.async_set_device_state(self.device_id, ACTION_SET_TARGET_TEMPERATURE, params)
        except AlexaError as err:
            raise self._communication_error(channel, err) from err

    def _cache_setpoint(self, name: str, value: float, scale: str) -> None:
        self._cache.set(
            self.device_id,
            CapabilityState(
                namespace=NAMESPACE_THERMOSTAT,
                name=name,
                value=Temperature(value=value, scale=scale.upper()),
            ),
        )

    async def async_set_target_temperature(self, value: Any) -> None:
        """Set the single target temperature.

        Ignored while the thermostat is in AUTO (or unknown) mode and while no
        sensor reading is cached to tell the active scale.
        """
        channel = "Set target temperature"
        _LOGGER.debug("Triggered set target temperature for %s: %s", self.name, value)

        sensor = self._cache.get(self.device_id, NAMESPACE_TEMPERATURE_SENSOR, NAME_TEMPERATURE)
        if is_in_auto_or_invalid_mode(self._cache, self.device_id):
            _LOGGER.debug("Ignoring target temperature for %s: mode is auto or unknown", self.name)
            return
        if sensor is None or not is_temperature(sensor.value):
            _LOGGER.debug("Ignoring target temperature for %s: temperature scale unknown", self.name)
            return
        if not is_number(value):
            raise AlexaInvalidValueError(f"Invalid target temperature: {value!r}")

        scale = sensor.value.scale
        new_temp = map_local_temp_to_alexa(clamp(value, MIN_TARGET_TEMP, MAX_TARGET_TEMP), scale)
        await self._async_send(
            channel,
            {
                PARAM_TARGET_SCALE: scale.lower(),
                PARAM_TARGET_VALUE: format_number(new_temp),
            },
        )
        self._cache_setpoint(NAME_TARGET_SETPOINT, new_temp, scale)

    async def async_set_cool_threshold(self, value: Any) -> None:
        """Set the cooling threshold, resending the cached heating threshold."""
        _LOGGER.debug("Triggered set cooling temperature for %s: %s", self.name, value)
        await self._async_set_threshold(
            "Set cooling temperature",
            value,
            written=(NAME_UPPER_SETPOINT, PARAM_UPPER_SCALE, PARAM_UPPER_VALUE),
            paired=(NAME_LOWER_SETPOINT, PARAM_LOWER_SCALE, PARAM_LOWER_VALUE),
            minimum=MIN_COOL_TEMP,
            maximum=MAX_COOL_TEMP,
        )

    async def async_set_heat_threshold(self, value: Any) -> None:
        """Set the heating threshold, resending the cached cooling threshold."""
        _LOGGER.debug("Triggered set heating temperature for %s: %s", self.name, value)
        await self._async_set_threshold(
            "Set heating temperature",
            value,
            written=(NAME_LOWER_SETPOINT, PARAM_LOWER_SCALE, PARAM_LOWER_VALUE),
            paired=(NAME_UPPER_SETPOINT, PARAM_UPPER_SCALE, PARAM_UPPER_VALUE),
            minimum=MIN_HEAT_TEMP,
            maximum=MAX_HEAT_TEMP,
        )

    async def _async_set_threshold(
        self,
        channel: str,
        value: Any,
        *,
        written: tuple[str, str, str],
        paired: tuple[str, str, str],
        minimum: float,
        maximum: float,
    ) -> None:
        written_name, written_scale_param, written_value_param = written
        paired_name, paired_scale_param, paired_value_param = paired

        paired_state = self._cache.get(self.device_id, NAMESPACE_THERMOSTAT, paired_name)
        if paired_state is None or not is_temperature(paired_state.value):
            raise AlexaNotAllowedError(f"{channel} needs a known {paired_name} for {self.name}")
        if not is_number(value):
            raise AlexaInvalidValueError(f"Invalid threshold temperature: {value!r}")

        # Both setpoints share the scale of the one already reported.
        scale = paired_state.value.scale
        units = scale.lower()
        new_temp = map_local_temp_to_alexa(clamp(value, minimum, maximum), scale)
        await self._async_send(
            channel,
            {
                written_scale_param: units,
                written_value_param: format_number(new_temp),
                paired_scale_param: units,
                paired_value_param: format_number(paired_state.value.value),
            },
        )
        self._cache_setpoint(written_name, new_temp, scale)

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Reject mode changes; the mode is only reported."""
        raise AlexaReadOnlyError(f"Thermostat mode of {self.name} is read-only")

    async def async_set_temperature_units(self, unit: UnitOfTemperature) -> None:
        """Reject display unit changes; the unit is only reported."""
        raise AlexaReadOnlyError(f"Temperature units of {self.name} are read-only")
