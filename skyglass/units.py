"""Display conversions from canonical metric values.

Every function takes a metric value plus a unit key from the user's settings.
Unknown unit keys fall back to the metric representation instead of raising.
"""
from __future__ import annotations

import math
from typing import Optional, Union

from .settings_store import SettingsStore

Number = Union[int, float]

TEMP_UNITS = ("C", "F")
WIND_UNITS = ("m/s", "km/h", "mph")
PRESSURE_UNITS = ("hPa", "mmHg", "inHg")

MS_TO_KMH = 3.6
MS_TO_MPH = 2.237
HPA_TO_MMHG = 0.750062
HPA_TO_INHG = 0.02953

AQI_LABELS = {1: "Good", 2: "Fair", 3: "Moderate", 4: "Poor", 5: "Very Poor"}


def round_half_away(value: Number) -> Number:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3).

    NaN and infinities cannot be rounded and are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def format_temperature(celsius: Number, unit: str) -> Number:
    if unit == "F":
        return round_half_away(celsius * 9 / 5 + 32)
    return round_half_away(celsius)


def fahrenheit_to_celsius(fahrenheit: Number) -> Number:
    return round_half_away((fahrenheit - 32) * 5 / 9)


def convert_wind_speed(speed_ms: Number, unit: str) -> float:
    if unit == "km/h":
        return speed_ms * MS_TO_KMH
    if unit == "mph":
        return speed_ms * MS_TO_MPH
    return float(speed_ms)


def format_wind_speed(speed_ms: Number, unit: str) -> str:
    return f"{convert_wind_speed(speed_ms, unit):.1f}"


def convert_pressure(pressure_hpa: Number, unit: str) -> Number:
    if unit == "mmHg":
        return pressure_hpa * HPA_TO_MMHG
    if unit == "inHg":
        return pressure_hpa * HPA_TO_INHG
    return pressure_hpa


def format_pressure(pressure_hpa: Number, unit: str) -> str:
    if unit == "mmHg":
        return str(round_half_away(convert_pressure(pressure_hpa, unit)))
    if unit == "inHg":
        return f"{convert_pressure(pressure_hpa, unit):.2f}"
    # Providers report whole hectopascals; JSON decoding may still hand us 1013.0.
    if isinstance(pressure_hpa, float) and pressure_hpa.is_integer():
        return str(int(pressure_hpa))
    return str(pressure_hpa)


def format_visibility(visibility_m: Optional[Number]) -> str:
    if not visibility_m:
        return "N/A"
    return f"{visibility_m / 1000:.1f} km"


def aqi_label(aqi: Optional[int]) -> str:
    if aqi is None:
        return "N/A"
    return AQI_LABELS.get(aqi, "N/A")


class UnitConverter:
    """Formats metric values using whatever units the settings currently hold."""

    def __init__(self, settings_store: SettingsStore) -> None:
        self._settings = settings_store

    def temperature(self, celsius: Number) -> Number:
        return format_temperature(celsius, self._settings.settings.temp_unit)

    def wind_speed(self, speed_ms: Number) -> str:
        return format_wind_speed(speed_ms, self._settings.settings.wind_unit)

    def pressure(self, pressure_hpa: Number) -> str:
        return format_pressure(pressure_hpa, self._settings.settings.pressure_unit)


__all__ = [
    "PRESSURE_UNITS",
    "TEMP_UNITS",
    "UnitConverter",
    "WIND_UNITS",
    "aqi_label",
    "convert_pressure",
    "convert_wind_speed",
    "fahrenheit_to_celsius",
    "format_pressure",
    "format_temperature",
    "format_visibility",
    "format_wind_speed",
    "round_half_away",
]
