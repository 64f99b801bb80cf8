"""Key-value persistence for client state.

Settings, search history, the last resolved city and the session credentials
live in one small store scoped to the device.  Components only see the
:class:`KeyValueStore` protocol so tests can use :class:`MemoryStore`.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol


logger = logging.getLogger(__name__)

SETTINGS_KEY = "appSettings"
HISTORY_KEY = "quickCities"
LAST_CITY_KEY = "lastCity"
TOKEN_KEY = "token"
USER_KEY = "user"


class KeyValueStore(Protocol):
    """Durable string storage keyed by name."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStore:
    """In-process store, used by tests and as a throwaway default."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class JsonFileStore:
    """Store every key in a single JSON document on disk.

    The file is rewritten atomically on each mutation.  An unreadable file is
    treated as empty so a corrupted state directory never prevents startup.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._data = self._read()

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._write()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._write()

    def _read(self) -> Dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError:
            logger.warning("Failed to read state file %s", self.path, exc_info=True)
            return {}
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("State file %s is not valid JSON, starting empty", self.path)
            return {}
        if not isinstance(payload, dict):
            logger.warning("State file %s does not hold a mapping, starting empty", self.path)
            return {}
        return {str(key): value for key, value in payload.items() if isinstance(value, str)}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".state-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._data, handle, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


__all__ = [
    "HISTORY_KEY",
    "JsonFileStore",
    "KeyValueStore",
    "LAST_CITY_KEY",
    "MemoryStore",
    "SETTINGS_KEY",
    "TOKEN_KEY",
    "USER_KEY",
]
