"""Data update coordinator for Alexa Thermostat."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import timedelta
import logging

from homeassistant.components.climate import HVACMode
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryAuthFailed, HomeAssistantError
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .api import AlexaApiClient, AlexaApiError, AlexaAuthError, AlexaConnectionError
from .bridge import ThermostatBridge
from .cache import AlexaStateCache
from .models import AlexaDevice, ThermostatReading

_LOGGER = logging.getLogger(__name__)


class AlexaThermostatCoordinator(DataUpdateCoordinator[dict[str, ThermostatReading | None]]):
    """Polls Alexa thermostat state and routes writes through the bridge."""

    def __init__(
        self,
        hass: HomeAssistant,
        *,
        config_entry: ConfigEntry | None,
        client: AlexaApiClient,
        cache: AlexaStateCache,
        devices: tuple[AlexaDevice, ...],
        scan_interval_seconds: int,
    ) -> None:
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name="Alexa Thermostat",
            update_interval=timedelta(seconds=scan_interval_seconds),
        )
        self.client = client
        self.cache = cache
        self.devices = {device.entity_id: device for device in devices}
        self._bridges = {
            device.entity_id: ThermostatBridge(
                device_id=device.entity_id,
                cache=cache,
                sink=client,
                name=device.display_name,
            )
            for device in devices
        }

    async def _async_update_data(self) -> dict[str, ThermostatReading | None]:
        """Refresh all snapshots and map them into climate readings."""
        try:
            await self.cache.async_refresh(list(self.devices))
        except AlexaAuthError as err:
            raise ConfigEntryAuthFailed from err
        except (AlexaConnectionError, AlexaApiError) as err:
            raise UpdateFailed(str(err)) from err

        readings: dict[str, ThermostatReading | None] = {}
        for device_id, bridge in self._bridges.items():
            if not self.cache.is_fresh(device_id):
                readings[device_id] = None
                continue
            readings[device_id] = await bridge.async_read_state()
        return readings

    def get_device(self, device_id: str) -> AlexaDevice:
        """Return one discovered thermostat."""
        return self.devices[device_id]

    def get_reading(self, device_id: str) -> ThermostatReading | None:
        """Return the latest reading for a thermostat."""
        if self.data is None:
            return None
        return self.data.get(device_id)

    def _bridge(self, device_id: str) -> ThermostatBridge:
        bridge = self._bridges.get(device_id)
        if bridge is None:
            raise HomeAssistantError(f"Unknown Alexa thermostat: {device_id}")
        return bridge

    async def async_set_target_temperature(self, device_id: str, value: float) -> None:
        """Set the single target temperature of a thermostat."""
        await self._async_execute_write(device_id, lambda bridge: bridge.async_set_target_temperature(value))

    async def async_set_temperature_range(
        self,
        device_id: str,
        *,
        heat: float | None = None,
        cool: float | None = None,
    ) -> None:
        """Set heating and/or cooling thresholds, heating first."""

        async def _write(bridge: ThermostatBridge) -> None:
            if heat is not None:
                await bridge.async_set_heat_threshold(heat)
            if cool is not None:
                await bridge.async_set_cool_threshold(cool)

        await self._async_execute_write(device_id, _write)

    async def async_set_hvac_mode(self, device_id: str, hvac_mode: HVACMode) -> None:
        """Forward a mode change; the bridge rejects it as read-only."""
        await self._async_execute_write(device_id, lambda bridge: bridge.async_set_hvac_mode(hvac_mode))

    async def _async_execute_write(
        self,
        device_id: str,
        action: Callable[[ThermostatBridge], Awaitable[None]],
    ) -> None:
        """Run a bridge write and republish the reading from the cache."""
        bridge = self._bridge(device_id)
        await action(bridge)

        readings = dict(self.data or {})
        readings[device_id] = await bridge.async_read_state()
        self.async_set_updated_data(readings)
