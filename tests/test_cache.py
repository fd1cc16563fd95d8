"""Tests for the Alexa snapshot cache."""

from __future__ import annotations

import pytest

from custom_components.alexa_thermostat.api import AlexaApiError, AlexaConnectionError
from custom_components.alexa_thermostat.models import CapabilityState, Temperature

from .conftest import DEVICE_ID, THERMOSTAT, state_payload, temperature, thermostat_payload


@pytest.mark.asyncio
async def test_fetch_snapshot_uses_fresh_copy(cache, mock_client):
    """A fresh snapshot is served without another request."""
    mock_client.async_get_device_states.return_value = thermostat_payload(lower=temperature(19))

    first = await cache.async_fetch_snapshot(DEVICE_ID)
    second = await cache.async_fetch_snapshot(DEVICE_ID)

    assert first == second
    assert cache.is_fresh(DEVICE_ID)
    mock_client.async_get_device_states.assert_awaited_once_with([DEVICE_ID])


@pytest.mark.asyncio
async def test_stale_snapshot_is_refetched(cache, mock_client, clock):
    """Snapshots older than the staleness window are fetched again."""
    await cache.async_fetch_snapshot(DEVICE_ID)
    clock.advance(31)
    assert not cache.is_fresh(DEVICE_ID)

    await cache.async_fetch_snapshot(DEVICE_ID)
    assert mock_client.async_get_device_states.await_count == 2


@pytest.mark.asyncio
async def test_fetch_snapshot_without_state_raises(cache, mock_client):
    """A device missing from the response is an API error."""
    mock_client.async_get_device_states.return_value = state_payload(
        device_id="other-device",
        errors=[{"entity": {"entityId": DEVICE_ID}, "code": "ENDPOINT_UNREACHABLE"}],
    )

    with pytest.raises(AlexaApiError):
        await cache.async_fetch_snapshot(DEVICE_ID)


@pytest.mark.asyncio
async def test_refresh_propagates_transport_errors(cache, mock_client):
    """Transport failures are not swallowed by the cache."""
    mock_client.async_get_device_states.side_effect = AlexaConnectionError("offline")

    with pytest.raises(AlexaConnectionError):
        await cache.async_refresh([DEVICE_ID])


@pytest.mark.asyncio
async def test_set_replaces_entry_in_snapshot(cache):
    """Point writes are visible to both point reads and snapshot reads."""
    await cache.async_refresh([DEVICE_ID])
    new_state = CapabilityState(THERMOSTAT, "targetSetpoint", Temperature(23.0, "CELSIUS"))

    cache.set(DEVICE_ID, new_state)
    cache.set(DEVICE_ID, CapabilityState(THERMOSTAT, "targetSetpoint", Temperature(23.5, "CELSIUS")))

    assert cache.get(DEVICE_ID, THERMOSTAT, "targetSetpoint").value == Temperature(23.5, "CELSIUS")
    snapshot = await cache.async_fetch_snapshot(DEVICE_ID)
    assert [state.name for state in snapshot].count("targetSetpoint") == 1


def test_set_on_unknown_device_is_stale(cache):
    """Entries written before any fetch never count as a fresh snapshot."""
    cache.set(DEVICE_ID, CapabilityState(THERMOSTAT, "thermostatMode", "HEAT"))

    assert cache.get(DEVICE_ID, THERMOSTAT, "thermostatMode").value == "HEAT"
    assert not cache.is_fresh(DEVICE_ID)


@pytest.mark.asyncio
async def test_as_dict_serializes_temperatures(cache, mock_client):
    """The cache dump is plain data."""
    mock_client.async_get_device_states.return_value = thermostat_payload(target=temperature(21))
    await cache.async_refresh([DEVICE_ID])

    dump = cache.as_dict()

    assert dump[DEVICE_ID]["fresh"] is True
    assert {"namespace": THERMOSTAT, "name": "targetSetpoint", "value": {"value": 21.0, "scale": "CELSIUS"}} in dump[
        DEVICE_ID
    ]["states"]


@pytest.mark.asyncio
async def test_local_write_survives_stale_refresh(cache, mock_client, clock):
    """A refresh that does not report a local write yet keeps the written entry."""
    mock_client.async_get_device_states.return_value = thermostat_payload(lower=temperature(19))
    await cache.async_refresh([DEVICE_ID])
    clock.advance(31)

    cache.set(DEVICE_ID, CapabilityState(THERMOSTAT, "lowerSetpoint", Temperature(18.0, "CELSIUS")))
    snapshot = await cache.async_fetch_snapshot(DEVICE_ID)

    assert mock_client.async_get_device_states.await_count == 2
    assert [state.value for state in snapshot if state.name == "lowerSetpoint"] == [Temperature(18.0, "CELSIUS")]
    assert cache.as_dict()[DEVICE_ID]["local_writes"] == ["lowerSetpoint"]


@pytest.mark.asyncio
async def test_local_write_released_once_reported(cache, mock_client, clock):
    """Alexa reporting the written value ends the local override."""
    await cache.async_refresh([DEVICE_ID])
    cache.set(DEVICE_ID, CapabilityState(THERMOSTAT, "lowerSetpoint", Temperature(18.0, "CELSIUS")))

    mock_client.async_get_device_states.return_value = thermostat_payload(lower=temperature(18))
    await cache.async_refresh([DEVICE_ID])
    assert cache.as_dict()[DEVICE_ID]["local_writes"] == []

    mock_client.async_get_device_states.return_value = thermostat_payload(lower=temperature(17))
    await cache.async_refresh([DEVICE_ID])
    assert cache.get(DEVICE_ID, THERMOSTAT, "lowerSetpoint").value == Temperature(17.0, "CELSIUS")


@pytest.mark.asyncio
async def test_local_write_expires(cache, mock_client, clock):
    """A local write Alexa never reports is dropped after the hold window."""
    await cache.async_refresh([DEVICE_ID])
    cache.set(DEVICE_ID, CapabilityState(THERMOSTAT, "lowerSetpoint", Temperature(18.0, "CELSIUS")))

    clock.advance(121)
    mock_client.async_get_device_states.return_value = thermostat_payload(lower=temperature(19))
    await cache.async_refresh([DEVICE_ID])

    assert cache.get(DEVICE_ID, THERMOSTAT, "lowerSetpoint").value == Temperature(19.0, "CELSIUS")


@pytest.mark.asyncio
async def test_device_error_keeps_previous_snapshot(cache, mock_client, clock):
    """A per-device error leaves the last good snapshot in place."""
    await cache.async_refresh([DEVICE_ID])
    mock_client.async_get_device_states.return_value = state_payload(
        device_id="other-device",
        errors=[{"entity": {"entityId": DEVICE_ID}, "code": "ENDPOINT_UNREACHABLE"}],
    )

    await cache.async_refresh([DEVICE_ID])

    assert cache.get(DEVICE_ID, THERMOSTAT, "thermostatMode").value == "HEAT"
    assert cache.is_fresh(DEVICE_ID)
