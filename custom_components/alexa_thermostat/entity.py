"""Shared entity classes for Alexa Thermostat."""

from __future__ import annotations

from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import AlexaThermostatCoordinator
from .models import AlexaDevice, ThermostatReading


class AlexaDeviceEntity(CoordinatorEntity[AlexaThermostatCoordinator]):
    """Base class for all Alexa device entities."""

    _attr_has_entity_name = True

    def __init__(
        self,
        *,
        coordinator: AlexaThermostatCoordinator,
        device_id: str,
        entity_key: str,
    ) -> None:
        """Initialize base entity."""
        super().__init__(coordinator)
        self._device_id = device_id
        self._entity_key = entity_key
        self._attr_unique_id = f"{device_id}_{entity_key}"

    @property
    def device(self) -> AlexaDevice:
        """Return the discovered device model."""
        return self.coordinator.get_device(self._device_id)

    @property
    def reading(self) -> ThermostatReading | None:
        """Return the latest reading from the coordinator."""
        return self.coordinator.get_reading(self._device_id)

    @property
    def available(self) -> bool:
        """Return True when the last refresh produced a reading for this device."""
        return super().available and self.reading is not None

    @property
    def device_info(self) -> DeviceInfo:
        """Return registry metadata for this thermostat."""
        device = self.device
        return DeviceInfo(
            identifiers={(DOMAIN, self._device_id)},
            name=device.display_name,
            manufacturer="Amazon Alexa",
            model=device.description or device.category or "Smart Home Thermostat",
        )
