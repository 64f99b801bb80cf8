"""Client-side weather session.

The session owns the current report and keeps the theme, search history and
last known city consistent with it.  Fetches are coroutines; several may be in
flight at once but only the most recently issued one is allowed to change the
state.
"""
from __future__ import annotations

import asyncio
import enum
import inspect
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from ..entities import Coordinates, LocationQuery, WeatherSnapshot, describe_query
from ..history import HistoryTracker
from ..providers.base import LocationNotFound, QuotaExceeded
from ..settings_store import SettingsStore
from ..storage import LAST_CITY_KEY, KeyValueStore
from ..themes import ThemeResolver


logger = logging.getLogger(__name__)

FALLBACK_CITY = "London"


class ErrorKind(enum.Enum):
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"


ERROR_MESSAGES = {
    ErrorKind.NOT_FOUND: "City not found. Please try another location.",
    ErrorKind.RATE_LIMITED: "Too many requests. Please try again later.",
    ErrorKind.NETWORK_ERROR: "Unable to fetch weather data. Check your connection.",
    ErrorKind.TIMEOUT: "The weather service took too long to respond. Please try again.",
}


class Phase(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class SessionState:
    snapshot: Optional[WeatherSnapshot] = None
    loading: bool = False
    error_kind: Optional[ErrorKind] = None

    @property
    def error_message(self) -> Optional[str]:
        if self.error_kind is None:
            return None
        return ERROR_MESSAGES[self.error_kind]

    @property
    def phase(self) -> Phase:
        if self.loading:
            return Phase.LOADING
        if self.error_kind is not None:
            return Phase.FAILED
        if self.snapshot is not None:
            return Phase.RESOLVED
        return Phase.IDLE


def classify_error(exc: BaseException) -> ErrorKind:
    if isinstance(exc, LocationNotFound):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, QuotaExceeded):
        return ErrorKind.RATE_LIMITED
    if isinstance(exc, asyncio.TimeoutError):
        return ErrorKind.TIMEOUT
    return ErrorKind.NETWORK_ERROR


class WeatherSession:
    def __init__(
        self,
        *,
        source: Any,
        settings: SettingsStore,
        theme: ThemeResolver,
        history: HistoryTracker,
        store: KeyValueStore,
        geolocator: Optional[Any] = None,
        fallback_city: str = FALLBACK_CITY,
        timeout: Optional[float] = None,
    ) -> None:
        self._source = source
        self._settings = settings
        self._theme = theme
        self._history = history
        self._store = store
        self._geolocator = geolocator
        self._fallback_city = fallback_city
        self._timeout = timeout
        self._state = SessionState()
        self._issued = 0
        self._city = store.get(LAST_CITY_KEY) or ""

    # Public API ---------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def theme(self) -> ThemeResolver:
        return self._theme

    @property
    def city(self) -> str:
        return self._city

    @property
    def quick_cities(self) -> List[str]:
        return self._history.entries

    async def fetch(self, query: LocationQuery) -> SessionState:
        self._issued += 1
        sequence = self._issued
        self._state = SessionState(snapshot=self._state.snapshot, loading=True)
        try:
            snapshot = await self._call_source(query)
        except Exception as exc:  # noqa: BLE001 - every source failure becomes an error kind
            if self._is_stale(sequence, query):
                return self._state
            kind = classify_error(exc)
            logger.warning("Weather fetch for %s failed (%s): %s", describe_query(query), kind.value, exc)
            self._state = SessionState(error_kind=kind)
            return self._state

        if self._is_stale(sequence, query):
            return self._state
        self._apply(snapshot)
        return self._state

    async def set_city(self, name: str) -> SessionState:
        return await self.fetch(name)

    async def start(self) -> SessionState:
        """Load the first report, trying each startup source once."""
        home_city = self._settings.settings.home_city
        if home_city:
            return await self.fetch(home_city)
        last_city = self._store.get(LAST_CITY_KEY)
        if last_city:
            return await self.fetch(last_city)
        coordinates = await self._locate()
        if coordinates is not None:
            return await self.fetch(coordinates)
        return await self.fetch(self._fallback_city)

    # Helpers ------------------------------------------------------------
    async def _call_source(self, query: LocationQuery) -> WeatherSnapshot:
        method = self._source.get_conditions
        if inspect.iscoroutinefunction(method):
            call = method(query)
        else:
            call = asyncio.to_thread(method, query)
        if self._timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self._timeout)

    async def _locate(self) -> Optional[Coordinates]:
        if self._geolocator is None:
            return None
        try:
            result = self._geolocator.locate()
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:  # noqa: BLE001 - geolocation falls through to the fixed city
            logger.warning("Geolocation failed, using %s: %s", self._fallback_city, exc)
            return None
        return result

    def _is_stale(self, sequence: int, query: LocationQuery) -> bool:
        if sequence == self._issued:
            return False
        logger.debug("Dropping response %s for %s, request %s is newer", sequence, describe_query(query), self._issued)
        return True

    def _apply(self, snapshot: WeatherSnapshot) -> None:
        self._state = SessionState(snapshot=snapshot)
        name = (snapshot.location_name or "").strip()
        if name:
            self._city = name
            self._store.set(LAST_CITY_KEY, name)
            self._history.record(name)
        self._theme.update(snapshot.condition_code, snapshot.temp_c, snapshot.condition_icon)


__all__ = [
    "ERROR_MESSAGES",
    "ErrorKind",
    "FALLBACK_CITY",
    "Phase",
    "SessionState",
    "WeatherSession",
    "classify_error",
]
