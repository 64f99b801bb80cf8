from __future__ import annotations

import json
import logging
from typing import List

from .storage import HISTORY_KEY, KeyValueStore


logger = logging.getLogger(__name__)


class HistoryTracker:
    """Most-recently-used list of searched cities, unique ignoring case."""

    CAPACITY = 5

    def __init__(self, store: KeyValueStore, key: str = HISTORY_KEY, capacity: int = CAPACITY) -> None:
        self._store = store
        self._key = key
        self._capacity = capacity
        self._entries = self._load()

    @property
    def entries(self) -> List[str]:
        return list(self._entries)

    def record(self, name: str) -> List[str]:
        if not name or not name.strip():
            raise ValueError("location name must be provided")
        folded = name.casefold()
        remaining = [entry for entry in self._entries if entry.casefold() != folded]
        self._entries = [name, *remaining][: self._capacity]
        self._persist()
        return self.entries

    def clear(self) -> None:
        self._entries = []
        self._persist()

    def _load(self) -> List[str]:
        raw = self._store.get(self._key)
        if raw is None:
            return []
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Persisted history is not valid JSON, starting empty")
            return []
        if not isinstance(payload, list):
            logger.warning("Persisted history is not a list, starting empty")
            return []
        entries: List[str] = []
        seen = set()
        for entry in payload:
            if not isinstance(entry, str) or not entry.strip():
                continue
            folded = entry.casefold()
            if folded in seen:
                continue
            seen.add(folded)
            entries.append(entry)
        return entries[: self._capacity]

    def _persist(self) -> None:
        self._store.set(self._key, json.dumps(self._entries))


__all__ = ["HistoryTracker"]
