from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Dict, List, Mapping

from .storage import SETTINGS_KEY, KeyValueStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """User preferences; persisted with the camelCase keys of the browser client."""

    temp_unit: str = "C"
    wind_unit: str = "m/s"
    pressure_unit: str = "hPa"
    theme_mode: str = "auto"
    theme_background: str = "default"
    map_layer: str = "temperature"
    map_style: str = "streets"
    language: str = "en"
    home_city: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {_PERSISTED_NAMES[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Settings":
        """Merge a persisted mapping over the defaults, field by field.

        Unknown keys are ignored; missing or null values keep their default.
        """
        values = {}
        for f in fields(cls):
            value = payload.get(_PERSISTED_NAMES[f.name])
            if isinstance(value, str):
                values[f.name] = value
        return cls(**values)


_PERSISTED_NAMES = {
    "temp_unit": "tempUnit",
    "wind_unit": "windUnit",
    "pressure_unit": "pressureUnit",
    "theme_mode": "themeMode",
    "theme_background": "themeBackground",
    "map_layer": "mapLayer",
    "map_style": "mapStyle",
    "language": "language",
    "home_city": "homeCity",
}

SettingsListener = Callable[[Settings, Settings], None]


class SettingsStore:
    def __init__(self, store: KeyValueStore, key: str = SETTINGS_KEY) -> None:
        self._store = store
        self._key = key
        self._listeners: List[SettingsListener] = []
        self._modal_open = False
        self._settings = self.load()
        self._persist()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def modal_open(self) -> bool:
        return self._modal_open

    def load(self) -> Settings:
        raw = self._store.get(self._key)
        if raw is None:
            return Settings()
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Persisted settings are not valid JSON, using defaults")
            return Settings()
        if not isinstance(payload, dict):
            logger.warning("Persisted settings are not a mapping, using defaults")
            return Settings()
        return Settings.from_dict(payload)

    def update(self, **changes: str) -> Settings:
        previous = self._settings
        self._settings = replace(previous, **changes)
        self._persist()
        for listener in list(self._listeners):
            listener(previous, self._settings)
        return self._settings

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def toggle_modal(self) -> bool:
        self._modal_open = not self._modal_open
        return self._modal_open

    def set_modal_open(self, value: bool) -> None:
        self._modal_open = bool(value)

    def _persist(self) -> None:
        self._store.set(self._key, json.dumps(self._settings.to_dict()))


__all__ = ["Settings", "SettingsListener", "SettingsStore"]
