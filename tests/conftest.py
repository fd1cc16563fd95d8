"""Shared fixtures for alexa_thermostat tests."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from custom_components.alexa_thermostat.cache import AlexaStateCache

DEVICE_ID = "amzn1.alexa.endpoint.thermostat-1"
DEVICE_NAME = "Living Room Thermostat"

SENSOR = "Alexa.TemperatureSensor"
THERMOSTAT = "Alexa.ThermostatController"


def temperature(value: float, scale: str = "CELSIUS") -> dict[str, Any]:
    """Return a raw Alexa temperature value."""
    return {"value": value, "scale": scale}


def capability(namespace: str, name: str, value: Any) -> str:
    """Return one capability state the way the phoenix API encodes it."""
    return json.dumps(
        {
            "namespace": namespace,
            "name": name,
            "value": value,
            "timeOfSample": "2024-01-01T00:00:00.000Z",
        }
    )


def state_payload(
    *capability_states: str,
    device_id: str = DEVICE_ID,
    errors: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Return a phoenix state response for one device."""
    return {
        "deviceStates": [
            {
                "entity": {"entityId": device_id, "entityType": "ENTITY"},
                "capabilityStates": list(capability_states),
            }
        ],
        "errors": errors or [],
    }


def thermostat_payload(
    *,
    mode: str | None = "HEAT",
    current: dict[str, Any] | None = None,
    target: dict[str, Any] | None = None,
    lower: dict[str, Any] | None = None,
    upper: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return a phoenix state response describing one thermostat."""
    states = []
    if current is not None:
        states.append(capability(SENSOR, "temperature", current))
    if mode is not None:
        states.append(capability(THERMOSTAT, "thermostatMode", mode))
    if target is not None:
        states.append(capability(THERMOSTAT, "targetSetpoint", target))
    if lower is not None:
        states.append(capability(THERMOSTAT, "lowerSetpoint", lower))
    if upper is not None:
        states.append(capability(THERMOSTAT, "upperSetpoint", upper))
    return state_payload(*states)


@pytest.fixture
def mock_client():
    """Create a mocked Alexa API client."""
    client = MagicMock()
    client.async_get_device_states = AsyncMock(return_value=thermostat_payload())
    client.async_set_device_state = AsyncMock(return_value={"controlResponses": [], "errors": []})
    return client


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Create a clock for cache freshness."""
    return FakeClock()


@pytest.fixture
def cache(mock_client, clock):
    """Create a state cache backed by the mocked client."""
    return AlexaStateCache(mock_client, clock=clock)
