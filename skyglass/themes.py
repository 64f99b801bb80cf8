"""Weather driven visual themes.

A theme is picked from the current condition code, temperature and the
day/night flag of the condition icon, unless the user pinned one of the flat
palettes in the settings.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple

from .entities import icon_is_night
from .settings_store import Settings, SettingsStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThemeDescriptor:
    key: str
    gradient: str
    overlay: str
    text: str
    card_background: str
    border: str
    background_image_base: Optional[str] = None


THEMES: Dict[str, ThemeDescriptor] = {
    "sunny": ThemeDescriptor(
        key="sunny",
        gradient="bg-gradient-to-br from-[#0061ff] to-[#60efff]",
        overlay="bg-blue-900/20",
        text="text-white",
        card_background="bg-white/10",
        border="border-white/20",
        background_image_base="/weather-backgrounds/sunny",
    ),
    "hot": ThemeDescriptor(
        key="hot",
        gradient="bg-gradient-to-br from-[#f83600] to-[#f9d423]",
        overlay="bg-orange-900/30",
        text="text-white",
        card_background="bg-white/10",
        border="border-white/20",
        background_image_base="/weather-backgrounds/sunny",
    ),
    "rainy": ThemeDescriptor(
        key="rainy",
        gradient="bg-gradient-to-br from-[#203a43] to-[#2c5364]",
        overlay="bg-slate-900/30",
        text="text-white",
        card_background="bg-black/20",
        border="border-white/10",
        background_image_base="/weather-backgrounds/rainy",
    ),
    "cloudy": ThemeDescriptor(
        key="cloudy",
        gradient="bg-gradient-to-br from-[#bdc3c7] to-[#2c3e50]",
        overlay="bg-gray-800/25",
        text="text-white",
        card_background="bg-white/10",
        border="border-white/20",
        background_image_base="/weather-backgrounds/cloudy",
    ),
    "snow": ThemeDescriptor(
        key="snow",
        gradient="bg-gradient-to-br from-[#e6dada] to-[#274046]",
        overlay="bg-slate-700/20",
        text="text-slate-900",
        card_background="bg-white/40",
        border="border-white/40",
    ),
    "storm": ThemeDescriptor(
        key="storm",
        gradient="bg-gradient-to-br from-[#141E30] to-[#243B55]",
        overlay="bg-black/50",
        text="text-white",
        card_background="bg-white/5",
        border="border-white/10",
    ),
    "night": ThemeDescriptor(
        key="night",
        gradient="bg-gradient-to-br from-[#0f172a] to-[#1e1b4b]",
        overlay="bg-black/40",
        text="text-white",
        card_background="bg-white/5",
        border="border-white/10",
        background_image_base="/weather-backgrounds/night",
    ),
    "blue": ThemeDescriptor(
        key="blue",
        gradient="bg-[#0f172a]",
        overlay="bg-blue-900/10",
        text="text-white",
        card_background="bg-white/5",
        border="border-white/10",
    ),
    "indigo": ThemeDescriptor(
        key="indigo",
        gradient="bg-[#1e1b4b]",
        overlay="bg-indigo-900/10",
        text="text-white",
        card_background="bg-white/5",
        border="border-white/10",
    ),
    "slate": ThemeDescriptor(
        key="slate",
        gradient="bg-[#020617]",
        overlay="bg-slate-900/10",
        text="text-white",
        card_background="bg-white/5",
        border="border-white/10",
    ),
}

MANUAL_PALETTES = ("blue", "indigo", "slate")
HOT_THRESHOLD_C = 32

# Clear sky, 25C, daytime: used until the first real report arrives.
NEUTRAL_INPUTS: Tuple[int, float, bool] = (800, 25.0, False)


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int:
        ...


def resolve(
    condition_code: Any,
    temperature_c: Any,
    is_night: bool,
    theme_mode: str,
    manual_theme_key: Optional[str],
) -> str:
    """Return the theme key for the given weather inputs and theme settings."""
    if theme_mode == "manual" and manual_theme_key != "default" and manual_theme_key in MANUAL_PALETTES:
        return manual_theme_key

    code = _as_number(condition_code)
    temperature = _as_number(temperature_c)
    wet = code is not None and 200 <= code < 600

    if is_night and not wet:
        return "night"
    if temperature is not None and temperature > HOT_THRESHOLD_C:
        return "hot"
    if code is None:
        return "sunny"
    if 200 <= code < 300:
        return "storm"
    if 300 <= code < 600:
        return "rainy"
    if 600 <= code < 700:
        return "snow"
    if 801 <= code <= 804:
        return "cloudy"
    return "sunny"


class ThemeResolver:
    """Holds the active theme and keeps it in sync with weather and settings."""

    def __init__(self, settings_store: SettingsStore, random_source: Optional[RandomSource] = None) -> None:
        self._settings = settings_store
        self._random = random_source or random.Random()
        self._last_inputs: Tuple[Any, Any, bool] = NEUTRAL_INPUTS
        self._theme = THEMES["sunny"]
        self._background_image: Optional[str] = None
        self._apply()
        self._unsubscribe = settings_store.subscribe(self._on_settings_changed)

    @property
    def theme(self) -> ThemeDescriptor:
        return self._theme

    @property
    def background_image(self) -> Optional[str]:
        return self._background_image

    @property
    def last_inputs(self) -> Tuple[Any, Any, bool]:
        return self._last_inputs

    def update(self, condition_code: Any, temperature_c: Any, icon: Optional[str] = None) -> ThemeDescriptor:
        self._last_inputs = (condition_code, temperature_c, icon_is_night(icon))
        return self._apply()

    def close(self) -> None:
        self._unsubscribe()

    def _on_settings_changed(self, previous: Settings, current: Settings) -> None:
        if (previous.theme_mode, previous.theme_background) == (current.theme_mode, current.theme_background):
            return
        self._apply()

    def _apply(self) -> ThemeDescriptor:
        settings = self._settings.settings
        code, temperature, night = self._last_inputs
        key = resolve(code, temperature, night, settings.theme_mode, settings.theme_background)
        theme = THEMES[key]
        self._theme = theme
        if theme.background_image_base:
            variant = self._random.randint(1, 2)
            self._background_image = f"{theme.background_image_base}-{variant}.png"
        else:
            self._background_image = None
        logger.debug("Active theme %s (background %s)", theme.key, self._background_image)
        return theme


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


__all__ = [
    "MANUAL_PALETTES",
    "NEUTRAL_INPUTS",
    "THEMES",
    "RandomSource",
    "ThemeDescriptor",
    "ThemeResolver",
    "resolve",
]
