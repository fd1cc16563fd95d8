"""Tests for the Alexa API client."""
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from custom_components.alexa_thermostat.api import (
    AlexaApiClient,
    AlexaApiError,
    AlexaAuthError,
    AlexaConnectionError,
    csrf_from_cookie,
)

COOKIE = "session-id=123-456; csrf=98765; ubid-main=abc"


@pytest.fixture
def mock_session():
    """Create a mock aiohttp session."""
    session = MagicMock(spec=aiohttp.ClientSession)
    return session


@pytest.fixture
def api_client(mock_session):
    """Create an API client with mocked session."""
    return AlexaApiClient(
        session=mock_session,
        cookie=COOKIE,
        amazon_domain="amazon.de",
    )


def _respond(mock_session, status, payload, content_type="application/json"):
    """Make the session return one response."""
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.headers = {"Content-Type": content_type}
    mock_response.json = AsyncMock(return_value=payload)
    mock_response.text = AsyncMock(return_value=str(payload))
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session.request = MagicMock(return_value=mock_response)
    return mock_response


def test_csrf_from_cookie():
    """Test csrf extraction from the cookie header."""
    assert csrf_from_cookie(COOKIE) == "98765"
    assert csrf_from_cookie("session-id=123") is None


@pytest.mark.asyncio
async def test_validate_success(api_client, mock_session):
    """Test bootstrap validation."""
    _respond(
        mock_session,
        200,
        {"authentication": {"authenticated": True, "customerId": "A1B2", "customerName": "Alex"}},
    )

    result = await api_client.async_validate()

    assert result["customerId"] == "A1B2"
    method, url = mock_session.request.call_args.args
    headers = mock_session.request.call_args.kwargs["headers"]
    assert method == "GET"
    assert url == "https://alexa.amazon.de/api/bootstrap"
    assert headers["Cookie"] == COOKIE
    assert headers["csrf"] == "98765"


@pytest.mark.asyncio
async def test_validate_not_authenticated(api_client, mock_session):
    """Test bootstrap of an expired session."""
    _respond(mock_session, 200, {"authentication": {"authenticated": False}})

    with pytest.raises(AlexaAuthError):
        await api_client.async_validate()


@pytest.mark.asyncio
async def test_rejected_cookie(api_client, mock_session):
    """Test HTTP 401 from the API."""
    _respond(mock_session, 401, {})

    with pytest.raises(AlexaAuthError):
        await api_client.async_get_entities()


@pytest.mark.asyncio
async def test_server_error(api_client, mock_session):
    """Test HTTP 5xx from the API."""
    _respond(mock_session, 503, "busy", content_type="text/plain")

    with pytest.raises(AlexaApiError):
        await api_client.async_get_device_states(["device-1"])


@pytest.mark.asyncio
async def test_connection_error(api_client, mock_session):
    """Test transport failures."""
    mock_session.request = MagicMock(side_effect=aiohttp.ClientConnectionError("reset"))

    with pytest.raises(AlexaConnectionError):
        await api_client.async_validate()


@pytest.mark.asyncio
async def test_get_entities(api_client, mock_session):
    """Test getting the smart-home entity listing."""
    _respond(mock_session, 200, [{"id": "device-1", "displayName": "Hallway"}])

    result = await api_client.async_get_entities()

    assert result[0]["id"] == "device-1"
    assert mock_session.request.call_args.kwargs["params"] == {"skillId": "amzn1.ask.1p.smarthome"}


@pytest.mark.asyncio
async def test_get_device_states(api_client, mock_session):
    """Test a batched state request."""
    _respond(mock_session, 200, {"deviceStates": [], "errors": []})

    await api_client.async_get_device_states(["device-1", "device-2"])

    method, url = mock_session.request.call_args.args
    assert method == "POST"
    assert url == "https://alexa.amazon.de/api/phoenix/state"
    assert mock_session.request.call_args.kwargs["json"] == {
        "stateRequests": [
            {"entityId": "device-1", "entityType": "ENTITY"},
            {"entityId": "device-2", "entityType": "ENTITY"},
        ]
    }


@pytest.mark.asyncio
async def test_get_device_states_without_states(api_client, mock_session):
    """Test a state response missing deviceStates."""
    _respond(mock_session, 200, {"errors": []})

    with pytest.raises(AlexaApiError):
        await api_client.async_get_device_states(["device-1"])


@pytest.mark.asyncio
async def test_set_device_state(api_client, mock_session):
    """Test sending a control request."""
    _respond(mock_session, 200, {"controlResponses": [{"entityId": "device-1"}], "errors": []})

    await api_client.async_set_device_state(
        "device-1",
        "setTargetTemperature",
        {"targetTemperature.scale": "celsius", "targetTemperature.value": "21.5"},
    )

    method, _ = mock_session.request.call_args.args
    assert method == "PUT"
    assert mock_session.request.call_args.kwargs["json"] == {
        "controlRequests": [
            {
                "entityId": "device-1",
                "entityType": "ENTITY",
                "parameters": {
                    "action": "setTargetTemperature",
                    "targetTemperature.scale": "celsius",
                    "targetTemperature.value": "21.5",
                },
            }
        ]
    }


@pytest.mark.asyncio
async def test_set_device_state_rejected(api_client, mock_session):
    """Test a control response carrying errors."""
    _respond(
        mock_session,
        200,
        {"controlResponses": [], "errors": [{"code": "TEMPERATURE_VALUE_OUT_OF_RANGE", "message": "no"}]},
    )

    with pytest.raises(AlexaApiError, match="TEMPERATURE_VALUE_OUT_OF_RANGE"):
        await api_client.async_set_device_state("device-1", "setTargetTemperature", {})
