"""Domain models and payload parsers for Alexa Thermostat."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import json
import logging
from typing import Any

from homeassistant.components.climate import HVACMode
from homeassistant.const import UnitOfTemperature

from .const import REQUIRED_OPERATIONS, SUPPORTED_SCALES

_LOGGER = logging.getLogger(__name__)


def _as_str(value: Any) -> str:
    """Return value as trimmed string."""
    if value is None:
        return ""
    return str(value).strip()


def is_number(value: Any) -> bool:
    """Return True for an int or float that is not a bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class Temperature:
    """A remote temperature reading or setpoint."""

    value: float
    scale: str


@dataclass(frozen=True, slots=True)
class CapabilityState:
    """One `(namespace, name, value)` entry of a device snapshot."""

    namespace: str
    name: str
    value: Any

    @property
    def key(self) -> tuple[str, str]:
        """Return the `(namespace, name)` pair identifying this channel."""
        return self.namespace, self.name


@dataclass(frozen=True, slots=True)
class AlexaDevice:
    """Smart-home entity from the behaviors listing."""

    entity_id: str
    display_name: str
    description: str
    category: str
    supported_operations: tuple[str, ...]

    @property
    def is_thermostat(self) -> bool:
        """Return True when every operation a thermostat needs is supported."""
        return all(operation in self.supported_operations for operation in REQUIRED_OPERATIONS)


@dataclass(frozen=True, slots=True)
class ThermostatReading:
    """Local view of one thermostat; `None` marks a channel that could not be read."""

    current_temperature: float | None = None
    temperature_unit: UnitOfTemperature | None = None
    hvac_mode: HVACMode | None = None
    target_temperature: float | None = None
    cool_threshold: float | None = None
    heat_threshold: float | None = None


def is_temperature(value: Any) -> bool:
    """Return True for a temperature with a numeric magnitude and a known scale."""
    return isinstance(value, Temperature) and is_number(value.value) and value.scale in SUPPORTED_SCALES


def find_state(
    snapshot: Iterable[CapabilityState],
    namespace: str,
    name: str,
) -> CapabilityState | None:
    """Return the first entry matching `(namespace, name)`."""
    for state in snapshot:
        if state.namespace == namespace and state.name == name:
            return state
    return None


def parse_capability_value(raw_value: Any) -> Any:
    """Turn a raw JSON value into a `Temperature` when it carries one."""
    if (
        isinstance(raw_value, dict)
        and is_number(raw_value.get("value"))
        and isinstance(raw_value.get("scale"), str)
        and raw_value["scale"].strip()
    ):
        return Temperature(value=float(raw_value["value"]), scale=raw_value["scale"].strip().upper())
    return raw_value


def parse_capability_state(raw: Any) -> CapabilityState | None:
    """Parse one capability state; the phoenix API sends them as JSON strings."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            _LOGGER.debug("Skipping capability state that is not JSON: %s", raw)
            return None

    if not isinstance(raw, dict):
        return None

    namespace = _as_str(raw.get("namespace"))
    name = _as_str(raw.get("name"))
    if not namespace or not name:
        return None

    return CapabilityState(
        namespace=namespace,
        name=name,
        value=parse_capability_value(raw.get("value")),
    )


def parse_device_states(
    payload: dict[str, Any],
) -> tuple[dict[str, tuple[CapabilityState, ...]], dict[str, str]]:
    """Parse a phoenix state response into snapshots and per-device error codes."""
    snapshots: dict[str, tuple[CapabilityState, ...]] = {}
    for device_state in payload.get("deviceStates") or []:
        if not isinstance(device_state, dict):
            continue
        entity_id = _as_str((device_state.get("entity") or {}).get("entityId"))
        if not entity_id:
            continue

        states: list[CapabilityState] = []
        for raw_state in device_state.get("capabilityStates") or []:
            state = parse_capability_state(raw_state)
            if state is not None:
                states.append(state)
        snapshots[entity_id] = tuple(states)

    errors: dict[str, str] = {}
    for raw_error in payload.get("errors") or []:
        if not isinstance(raw_error, dict):
            continue
        entity_id = _as_str((raw_error.get("entity") or {}).get("entityId"))
        if entity_id:
            errors[entity_id] = _as_str(raw_error.get("code")) or "UNKNOWN"

    return snapshots, errors


def parse_entities(payload: Iterable[Any]) -> tuple[AlexaDevice, ...]:
    """Parse the behaviors entity listing into devices."""
    devices: dict[str, AlexaDevice] = {}
    for raw in payload:
        if not isinstance(raw, dict):
            continue
        entity_id = _as_str(raw.get("id"))
        if not entity_id or entity_id in devices:
            continue

        provider_data = raw.get("providerData") or {}
        devices[entity_id] = AlexaDevice(
            entity_id=entity_id,
            display_name=_as_str(raw.get("displayName")) or entity_id,
            description=_as_str(raw.get("description")),
            category=_as_str(provider_data.get("categoryType")),
            supported_operations=tuple(
                _as_str(operation) for operation in raw.get("supportedOperations") or []
            ),
        )

    return tuple(devices.values())
