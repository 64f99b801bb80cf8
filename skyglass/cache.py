from __future__ import annotations

import time
from typing import Any, Callable, Dict, Tuple


class WeatherCache:
    """In-process TTL cache for weather reports."""

    def __init__(self, time_func: Callable[[], float] = time.monotonic) -> None:
        self._time_func = time_func
        self._storage: Dict[str, Tuple[float, Any]] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Any:
        item = self._storage.get(key)
        if not item:
            self.misses += 1
            return None
        expires_at, value = item
        if expires_at <= self._time_func():
            self._storage.pop(key, None)
            self.misses += 1
            return None
        self.hits += 1
        return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        self._storage[key] = (self._time_func() + ttl, value)

    def clear(self) -> None:
        self._storage.clear()

    def stats(self) -> Dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "keys": len(self._storage)}


__all__ = ["WeatherCache"]
