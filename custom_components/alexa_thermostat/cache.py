"""In-memory cache of Alexa device snapshots."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
import logging
import time
from typing import Any, Protocol

from .api import AlexaApiClient, AlexaApiError
from .const import DEFAULT_CACHE_STALE_SECONDS, DEFAULT_WRITE_HOLD_SECONDS
from .models import CapabilityState, Temperature, parse_device_states

_LOGGER = logging.getLogger(__name__)


class PointCache(Protocol):
    """Point lookup and update of a single cached channel."""

    def get(self, device_id: str, namespace: str, name: str) -> CapabilityState | None:
        ...

    def set(self, device_id: str, state: CapabilityState) -> None:
        ...


class SnapshotCache(PointCache, Protocol):
    """Point cache that can also hand out a whole device snapshot."""

    async def async_fetch_snapshot(self, device_id: str) -> Sequence[CapabilityState]:
        ...


@dataclass
class CachedSnapshot:
    """Snapshot entries of one device plus fetch time."""

    states: list[CapabilityState] = field(default_factory=list)
    fetched_at: float = 0.0
    # Locally written entries and their write time, kept until Alexa reports them.
    local_writes: dict[tuple[str, str], tuple[CapabilityState, float]] = field(default_factory=dict)


def _put(states: list[CapabilityState], state: CapabilityState) -> None:
    """Replace the entry with the same key, or append."""
    for index, existing in enumerate(states):
        if existing.key == state.key:
            states[index] = state
            return
    states.append(state)


class AlexaStateCache:
    """Snapshot cache backed by the phoenix state endpoint."""

    def __init__(
        self,
        client: AlexaApiClient,
        *,
        stale_after: float = DEFAULT_CACHE_STALE_SECONDS,
        hold_writes_for: float = DEFAULT_WRITE_HOLD_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._stale_after = stale_after
        self._hold_writes_for = hold_writes_for
        self._clock = clock
        self._snapshots: dict[str, CachedSnapshot] = {}

    def is_fresh(self, device_id: str) -> bool:
        """Return True when the device snapshot was fetched recently."""
        cached = self._snapshots.get(device_id)
        if cached is None or cached.fetched_at == 0:
            return False
        return self._clock() - cached.fetched_at <= self._stale_after

    async def async_refresh(self, device_ids: Iterable[str]) -> None:
        """Fetch snapshots for the given devices in one request."""
        requested = list(dict.fromkeys(device_ids))
        if not requested:
            return

        payload = await self._client.async_get_device_states(requested)
        snapshots, errors = parse_device_states(payload)
        now = self._clock()

        for device_id, states in snapshots.items():
            merged = list(states)
            local_writes = self._pending_writes(device_id, states, now)
            for state, _ in local_writes.values():
                _put(merged, state)
            self._snapshots[device_id] = CachedSnapshot(
                states=merged, fetched_at=now, local_writes=local_writes
            )

        for device_id, code in errors.items():
            _LOGGER.debug("Alexa returned %s for %s, snapshot not updated", code, device_id)

    def _pending_writes(
        self,
        device_id: str,
        reported: Sequence[CapabilityState],
        now: float,
    ) -> dict[tuple[str, str], tuple[CapabilityState, float]]:
        """Return local writes Alexa has not reported yet and that are still held."""
        previous = self._snapshots.get(device_id)
        if previous is None:
            return {}

        remote: dict[tuple[str, str], CapabilityState] = {}
        for state in reported:
            remote.setdefault(state.key, state)

        pending = {}
        for key, (state, written_at) in previous.local_writes.items():
            if remote.get(key) == state or now - written_at > self._hold_writes_for:
                continue
            _LOGGER.debug("Keeping local %s for %s until Alexa reports it", state.name, device_id)
            pending[key] = (state, written_at)
        return pending

    async def async_fetch_snapshot(self, device_id: str) -> tuple[CapabilityState, ...]:
        """Return the device snapshot, refetching it when stale."""
        if not self.is_fresh(device_id):
            await self.async_refresh([device_id])

        cached = self._snapshots.get(device_id)
        if cached is None or cached.fetched_at == 0:
            raise AlexaApiError(f"Alexa returned no state for {device_id}")
        return tuple(cached.states)

    def get(self, device_id: str, namespace: str, name: str) -> CapabilityState | None:
        """Return the cached entry for one channel."""
        cached = self._snapshots.get(device_id)
        if cached is None:
            return None
        for state in cached.states:
            if state.namespace == namespace and state.name == name:
                return state
        return None

    def set(self, device_id: str, state: CapabilityState) -> None:
        """Replace (or add) the cached entry for one channel after a local write."""
        cached = self._snapshots.setdefault(device_id, CachedSnapshot())
        _put(cached.states, state)
        cached.local_writes[state.key] = (state, self._clock())

    def as_dict(self) -> dict[str, Any]:
        """Return a plain representation of the cache."""
        return {
            device_id: {
                "fresh": self.is_fresh(device_id),
                "local_writes": [name for _, name in cached.local_writes],
                "states": [
                    {
                        "namespace": state.namespace,
                        "name": state.name,
                        "value": (
                            {"value": state.value.value, "scale": state.value.scale}
                            if isinstance(state.value, Temperature)
                            else state.value
                        ),
                    }
                    for state in cached.states
                ],
            }
            for device_id, cached in self._snapshots.items()
        }
