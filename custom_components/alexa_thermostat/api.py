"""Async API client for the Alexa smart-home cloud endpoints."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
import logging
from typing import Any

import aiohttp

from .const import (
    API_BASE_URL_TEMPLATE,
    BOOTSTRAP_PATH,
    DEFAULT_AMAZON_DOMAIN,
    ENTITIES_PATH,
    ENTITY_TYPE,
    PHOENIX_STATE_PATH,
    SMARTHOME_SKILL_ID,
)

_LOGGER = logging.getLogger(__name__)


class AlexaError(Exception):
    """Base error for Alexa integration."""


class AlexaConnectionError(AlexaError):
    """Raised when the remote endpoint cannot be reached."""


class AlexaAuthError(AlexaError):
    """Raised when the session cookie is rejected."""


class AlexaApiError(AlexaError):
    """Raised when API returns an error payload."""


def csrf_from_cookie(cookie: str) -> str | None:
    """Return the csrf token embedded in a cookie header value."""
    for part in cookie.split(";"):
        key, _, value = part.strip().partition("=")
        if key == "csrf" and value:
            return value
    return None


class AlexaApiClient:
    """Async client for the Alexa bootstrap, behaviors and phoenix endpoints."""

    def __init__(
        self,
        *,
        session: aiohttp.ClientSession,
        cookie: str,
        amazon_domain: str = DEFAULT_AMAZON_DOMAIN,
        request_timeout: float = 20,
    ) -> None:
        self._session = session
        self._cookie = cookie.strip()
        self._csrf = csrf_from_cookie(self._cookie)
        self._base_url = API_BASE_URL_TEMPLATE.format(domain=amazon_domain.strip().lstrip("."))
        self._request_timeout = request_timeout

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Cookie": self._cookie,
        }
        if self._csrf:
            headers["csrf"] = self._csrf
        return headers

    async def _async_raw_request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> tuple[int, Any]:
        """Run a raw HTTP request and return status + decoded payload."""
        timeout = aiohttp.ClientTimeout(total=self._request_timeout)

        try:
            async with self._session.request(
                method,
                url,
                headers=self._headers(),
                params=params,
                json=json_body,
                timeout=timeout,
            ) as response:
                status = response.status
                content_type = response.headers.get("Content-Type", "")

                if "json" in content_type:
                    payload: Any = await response.json(content_type=None)
                else:
                    text = await response.text()
                    payload = {"raw": text}

                return status, payload

        except (asyncio.TimeoutError, aiohttp.ClientError) as err:
            raise AlexaConnectionError(f"Request to Alexa API failed: {err}") from err

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> Any:
        """Run a request and validate the HTTP status."""
        status, payload = await self._async_raw_request(
            method,
            f"{self._base_url}{path}",
            params=params,
            json_body=json_body,
        )

        if status in (401, 403):
            raise AlexaAuthError(f"Alexa API rejected the session cookie for {path} (HTTP {status})")

        if status >= 400:
            raise AlexaApiError(f"Alexa API request failed for {path} with HTTP {status}")

        return payload

    async def async_validate(self) -> dict[str, Any]:
        """Fetch bootstrap payload and verify the session is authenticated."""
        payload = await self._request("GET", BOOTSTRAP_PATH)
        authentication = payload.get("authentication") if isinstance(payload, dict) else None
        if not isinstance(authentication, dict) or not authentication.get("authenticated"):
            raise AlexaAuthError("Alexa session is not authenticated")
        return authentication

    async def async_get_entities(self) -> list[dict[str, Any]]:
        """Fetch smart-home entities exposed to the account."""
        payload = await self._request(
            "GET",
            ENTITIES_PATH,
            params={"skillId": SMARTHOME_SKILL_ID},
        )
        if not isinstance(payload, list):
            raise AlexaApiError("Alexa entity listing did not return a list")
        return payload

    async def async_get_device_states(self, device_ids: Iterable[str]) -> dict[str, Any]:
        """Fetch capability states for a batch of devices."""
        body = {
            "stateRequests": [
                {"entityId": device_id, "entityType": ENTITY_TYPE} for device_id in device_ids
            ]
        }
        payload = await self._request("POST", PHOENIX_STATE_PATH, json_body=body)
        if not isinstance(payload, dict) or "deviceStates" not in payload:
            raise AlexaApiError("Alexa state response did not include deviceStates")
        return payload

    async def async_set_device_state(
        self,
        device_id: str,
        action: str,
        params: Mapping[str, str],
    ) -> dict[str, Any]:
        """Send one control request for a device."""
        body = {
            "controlRequests": [
                {
                    "entityId": device_id,
                    "entityType": ENTITY_TYPE,
                    "parameters": {"action": action, **params},
                }
            ]
        }
        _LOGGER.debug("Sending %s to %s: %s", action, device_id, params)
        payload = await self._request("PUT", PHOENIX_STATE_PATH, json_body=body)
        if not isinstance(payload, dict):
            raise AlexaApiError(f"Alexa control response for {device_id} was not an object")

        errors = payload.get("errors") or []
        if errors:
            first = errors[0] if isinstance(errors[0], dict) else {}
            raise AlexaApiError(
                f"Alexa rejected {action} for {device_id}: "
                f"code={first.get('code') or 'unknown'}, message={first.get('message') or 'unknown'}"
            )

        return payload
