"""Runtime data structures for Alexa Thermostat integration."""

from __future__ import annotations

from dataclasses import dataclass

from .api import AlexaApiClient
from .cache import AlexaStateCache
from .coordinator import AlexaThermostatCoordinator


@dataclass(slots=True)
class AlexaRuntimeData:
    """Objects stored per config entry."""

    client: AlexaApiClient
    cache: AlexaStateCache
    coordinator: AlexaThermostatCoordinator
