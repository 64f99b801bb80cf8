"""Pydantic models for the OpenWeatherMap payloads we consume.

Only the fields the dashboard reads are declared; everything else in the
upstream documents is ignored.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Condition(_Payload):
    id: int
    main: str = ""
    description: str = ""
    icon: str = ""


class Coord(_Payload):
    lat: float
    lon: float


class MainBlock(_Payload):
    temp: float
    feels_like: Optional[float] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    pressure: Optional[float] = None
    humidity: Optional[float] = None


class WindBlock(_Payload):
    speed: float = 0.0


class CurrentWeatherPayload(_Payload):
    coord: Coord
    weather: List[Condition] = Field(min_length=1)
    main: MainBlock
    wind: WindBlock = Field(default_factory=WindBlock)
    visibility: Optional[float] = None
    name: str = ""
    dt: Optional[int] = None


class ForecastEntry(_Payload):
    dt: int
    main: MainBlock
    weather: List[Condition] = Field(min_length=1)
    wind: WindBlock = Field(default_factory=WindBlock)
    pop: float = 0.0
    dt_txt: Optional[str] = None


class ForecastPayload(_Payload):
    entries: List[ForecastEntry] = Field(default_factory=list, alias="list")


class AirQualityMain(_Payload):
    aqi: int

    @field_validator("aqi")
    @classmethod
    def _check_scale(cls, value: int) -> int:
        if not 1 <= value <= 5:
            raise ValueError("aqi must be between 1 and 5")
        return value


class AirQualityEntry(_Payload):
    main: AirQualityMain


class AirQualityPayload(_Payload):
    entries: List[AirQualityEntry] = Field(min_length=1, alias="list")


__all__ = [
    "AirQualityPayload",
    "Condition",
    "CurrentWeatherPayload",
    "ForecastEntry",
    "ForecastPayload",
]
