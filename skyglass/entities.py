from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float


LocationQuery = Union[str, Coordinates]


def describe_query(query: LocationQuery) -> str:
    if isinstance(query, Coordinates):
        return f"{query.lat:.4f},{query.lon:.4f}"
    return query


@dataclass(frozen=True)
class ForecastPoint:
    """A single 3-hour forecast step, in the same canonical units as the snapshot."""

    timestamp: datetime
    condition_code: int
    condition_icon: str
    condition_main: str
    temp_c: float
    feels_like_c: Optional[float] = None
    humidity_pct: Optional[float] = None
    wind_speed_ms: Optional[float] = None
    pressure_hpa: Optional[float] = None
    precipitation_probability: float = 0.0


@dataclass(frozen=True)
class WeatherSnapshot:
    """Normalized weather report for one location.

    Values are stored in canonical metric units so that the rendering layer can
    convert them on demand:
    - temperature in Celsius
    - wind speed in metres per second (m/s)
    - pressure in hectopascal (hPa)
    - visibility in metres
    """

    location_name: str
    coordinates: Coordinates
    condition_code: int
    condition_icon: str
    condition_description: str
    temp_c: float
    feels_like_c: float
    temp_min_c: float
    temp_max_c: float
    humidity_pct: float
    wind_speed_ms: float
    pressure_hpa: float
    visibility_m: Optional[float]
    observed_at: datetime
    forecast: Tuple[ForecastPoint, ...] = field(default_factory=tuple)
    aqi: Optional[int] = None

    @property
    def icon_is_night(self) -> bool:
        return icon_is_night(self.condition_icon)

    def hourly(self, count: int = 24) -> Tuple[ForecastPoint, ...]:
        return self.forecast[:count]

    def daily(self, days: int = 7) -> Tuple[ForecastPoint, ...]:
        # Forecast steps are 3 hours apart, so every 8th point starts a new day.
        return tuple(point for idx, point in enumerate(self.forecast) if idx % 8 == 0)[:days]


def icon_is_night(icon: Optional[str]) -> bool:
    return bool(icon) and str(icon).endswith("n")


def snapshot_to_dict(snapshot: WeatherSnapshot) -> Dict[str, Any]:
    payload = asdict(snapshot)
    payload["observed_at"] = _format_time(snapshot.observed_at)
    payload["forecast"] = [
        {**asdict(point), "timestamp": _format_time(point.timestamp)} for point in snapshot.forecast
    ]
    return payload


def snapshot_from_dict(payload: Dict[str, Any]) -> WeatherSnapshot:
    coordinates = payload["coordinates"]
    forecast = tuple(
        ForecastPoint(**{**point, "timestamp": _parse_time(point["timestamp"])})
        for point in payload.get("forecast") or ()
    )
    return WeatherSnapshot(
        location_name=payload["location_name"],
        coordinates=Coordinates(lat=coordinates["lat"], lon=coordinates["lon"]),
        condition_code=payload["condition_code"],
        condition_icon=payload["condition_icon"],
        condition_description=payload["condition_description"],
        temp_c=payload["temp_c"],
        feels_like_c=payload["feels_like_c"],
        temp_min_c=payload["temp_min_c"],
        temp_max_c=payload["temp_max_c"],
        humidity_pct=payload["humidity_pct"],
        wind_speed_ms=payload["wind_speed_ms"],
        pressure_hpa=payload["pressure_hpa"],
        visibility_m=payload.get("visibility_m"),
        observed_at=_parse_time(payload["observed_at"]),
        forecast=forecast,
        aqi=payload.get("aqi"),
    )


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


__all__ = [
    "Coordinates",
    "ForecastPoint",
    "LocationQuery",
    "WeatherSnapshot",
    "describe_query",
    "icon_is_night",
    "snapshot_from_dict",
    "snapshot_to_dict",
]
