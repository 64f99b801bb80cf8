"""OpenWeatherMap data source: current conditions, 5 day forecast and AQI."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import ValidationError

from .base import ProviderError, WeatherProvider
from .schemas import AirQualityPayload, CurrentWeatherPayload, ForecastEntry, ForecastPayload
from ..entities import Coordinates, ForecastPoint, LocationQuery, WeatherSnapshot


class OpenWeatherProvider(WeatherProvider):
    name = "openweather"
    base_url = "https://api.openweathermap.org/data/2.5"

    def __init__(self, api_key: str, base_url: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key
        self.base_url = (base_url or self.base_url).rstrip("/")
        self._log = logging.getLogger(self.__class__.__name__)

    # Public API ---------------------------------------------------------
    def get_conditions(self, query: LocationQuery) -> WeatherSnapshot:
        current = self._parse(CurrentWeatherPayload, self._get("weather", self._query_params(query)))
        coords = Coordinates(lat=current.coord.lat, lon=current.coord.lon)
        at = {"lat": coords.lat, "lon": coords.lon}

        forecast = self._parse(ForecastPayload, self._get("forecast", {**at, "units": "metric"}))
        aqi = self._air_quality(at)

        condition = current.weather[0]
        main = current.main
        return WeatherSnapshot(
            location_name=current.name,
            coordinates=coords,
            condition_code=condition.id,
            condition_icon=condition.icon,
            condition_description=condition.description,
            temp_c=main.temp,
            feels_like_c=_or(main.feels_like, main.temp),
            temp_min_c=_or(main.temp_min, main.temp),
            temp_max_c=_or(main.temp_max, main.temp),
            humidity_pct=_or(main.humidity, 0.0),
            wind_speed_ms=current.wind.speed,
            pressure_hpa=_or(main.pressure, 0.0),
            visibility_m=current.visibility,
            observed_at=_parse_timestamp(current.dt),
            forecast=tuple(_forecast_point(entry) for entry in forecast.entries),
            aqi=aqi,
        )

    # helpers ------------------------------------------------------------
    def _query_params(self, query: LocationQuery) -> Dict[str, object]:
        if isinstance(query, Coordinates):
            return {"lat": query.lat, "lon": query.lon, "units": "metric"}
        return {"q": query, "units": "metric"}

    def _get(self, endpoint: str, params: Dict[str, object]) -> dict:
        response = self._request("GET", f"{self.base_url}/{endpoint}", params={**params, "appid": self.api_key})
        return self._json(response)

    def _air_quality(self, at: Dict[str, float]) -> Optional[int]:
        try:
            payload = self._parse(AirQualityPayload, self._get("air_pollution", at))
        except ProviderError as exc:
            self._log.warning("AQI unavailable: %s", exc)
            return None
        return payload.entries[0].main.aqi

    def _parse(self, model, data: dict):
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            self._log.error("Unexpected %s payload: %s", model.__name__, exc)
            raise ProviderError(f"invalid {model.__name__}") from exc


def _forecast_point(entry: ForecastEntry) -> ForecastPoint:
    condition = entry.weather[0]
    return ForecastPoint(
        timestamp=_parse_timestamp(entry.dt),
        condition_code=condition.id,
        condition_icon=condition.icon,
        condition_main=condition.main,
        temp_c=entry.main.temp,
        feels_like_c=entry.main.feels_like,
        humidity_pct=entry.main.humidity,
        wind_speed_ms=entry.wind.speed,
        pressure_hpa=entry.main.pressure,
        precipitation_probability=entry.pop,
    )


def _parse_timestamp(value: Optional[int]) -> datetime:
    if value is None:
        return datetime.now(tz=timezone.utc)
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _or(value: Optional[float], default: float) -> float:
    return default if value is None else value


__all__ = ["OpenWeatherProvider"]
