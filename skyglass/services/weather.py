from __future__ import annotations

import logging
from typing import Any, Optional

from ..cache import WeatherCache
from ..entities import Coordinates, LocationQuery, WeatherSnapshot
from ..providers.base import LocationNotFound, ProviderError, QuotaExceeded


class WeatherService:
    """Weather data source used by sessions and the report API.

    Wraps a provider with a per-query report cache; provider errors propagate
    unchanged so callers can classify them.
    """

    REPORT_TTL = 15 * 60

    def __init__(
        self,
        provider: Any,
        cache: Optional[WeatherCache] = None,
        ttl: float = REPORT_TTL,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.provider = provider
        self.cache = cache or WeatherCache()
        self.ttl = ttl
        self._log = logger or logging.getLogger(self.__class__.__name__)

    # Public API ---------------------------------------------------------
    def get_conditions(self, query: LocationQuery) -> WeatherSnapshot:
        cache_key = self._cache_key(query)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached
        try:
            result = self.provider.get_conditions(query)
        except LocationNotFound:
            self._log.info("No location matches %s", cache_key)
            raise
        except QuotaExceeded:
            self._log.warning("Provider %s quota exceeded", self.provider.__class__.__name__)
            raise
        except ProviderError as exc:
            self._log.error("Provider %s failed: %s", self.provider.__class__.__name__, exc)
            raise
        self.cache.set(cache_key, result, self.ttl)
        return result

    # Helpers ------------------------------------------------------------
    def _cache_key(self, query: LocationQuery) -> str:
        if isinstance(query, Coordinates):
            return f"report:{query.lat:.3f}:{query.lon:.3f}"
        return f"report:city:{query.strip().casefold()}"


__all__ = ["WeatherService"]
