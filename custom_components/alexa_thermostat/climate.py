"""Climate platform for Alexa Thermostat."""
from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.climate import (
    ATTR_TARGET_TEMP_HIGH,
    ATTR_TARGET_TEMP_LOW,
    ClimateEntity,
    ClimateEntityFeature,
    HVACMode,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import ATTR_DISPLAY_UNITS, DOMAIN, MAX_TARGET_TEMP, MIN_HEAT_TEMP
from .coordinator import AlexaThermostatCoordinator
from .data import AlexaRuntimeData
from .entity import AlexaDeviceEntity

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Alexa thermostat climate entities."""
    runtime: AlexaRuntimeData = hass.data[DOMAIN][entry.entry_id]
    coordinator = runtime.coordinator

    async_add_entities(
        AlexaThermostatClimate(coordinator=coordinator, device_id=device_id)
        for device_id in coordinator.devices
    )


class AlexaThermostatClimate(AlexaDeviceEntity, ClimateEntity):
    """Representation of an Alexa thermostat."""

    _attr_name = None
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.TARGET_TEMPERATURE_RANGE
    )
    _attr_hvac_modes = [HVACMode.OFF, HVACMode.HEAT, HVACMode.COOL, HVACMode.AUTO]
    _attr_min_temp = MIN_HEAT_TEMP
    _attr_max_temp = MAX_TARGET_TEMP
    _attr_target_temperature_step = 0.5

    def __init__(self, *, coordinator: AlexaThermostatCoordinator, device_id: str) -> None:
        """Initialize the climate entity."""
        super().__init__(coordinator=coordinator, device_id=device_id, entity_key="climate")

    @property
    def current_temperature(self) -> float | None:
        """Return the current temperature."""
        reading = self.reading
        return reading.current_temperature if reading else None

    @property
    def target_temperature(self) -> float | None:
        """Return the target temperature."""
        reading = self.reading
        return reading.target_temperature if reading else None

    @property
    def target_temperature_low(self) -> float | None:
        """Return the heating threshold."""
        reading = self.reading
        return reading.heat_threshold if reading else None

    @property
    def target_temperature_high(self) -> float | None:
        """Return the cooling threshold."""
        reading = self.reading
        return reading.cool_threshold if reading else None

    @property
    def hvac_mode(self) -> HVACMode | None:
        """Return current HVAC mode."""
        reading = self.reading
        return reading.hvac_mode if reading else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the unit the thermostat itself displays."""
        reading = self.reading
        if reading is None or reading.temperature_unit is None:
            return {}
        return {ATTR_DISPLAY_UNITS: reading.temperature_unit}

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Reject mode changes; Alexa thermostat modes are read-only here."""
        await self.coordinator.async_set_hvac_mode(self._device_id, hvac_mode)

    async def async_set_temperature(self, **kwargs: Any) -> None:
        """Set target temperature or the heating/cooling range."""
        low = kwargs.get(ATTR_TARGET_TEMP_LOW)
        high = kwargs.get(ATTR_TARGET_TEMP_HIGH)
        if low is not None or high is not None:
            await self.coordinator.async_set_temperature_range(self._device_id, heat=low, cool=high)

        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is not None:
            await self.coordinator.async_set_target_temperature(self._device_id, temperature)
