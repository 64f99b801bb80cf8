from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from skyglass.entities import Coordinates, ForecastPoint, WeatherSnapshot
from skyglass.settings_store import SettingsStore
from skyglass.storage import MemoryStore


class FixedRandom:
    """Random source that always picks the same variant."""

    def __init__(self, value: int = 1) -> None:
        self.value = value
        self.calls = 0

    def randint(self, a: int, b: int) -> int:
        self.calls += 1
        return self.value


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def settings_store(store: MemoryStore) -> SettingsStore:
    return SettingsStore(store)


@pytest.fixture
def fixed_random() -> FixedRandom:
    return FixedRandom(2)


@pytest.fixture
def make_snapshot():
    def factory(
        name: str = "Paris",
        code: int = 800,
        temp: float = 20.0,
        icon: str = "01d",
        aqi=2,
        forecast_steps: int = 0,
    ) -> WeatherSnapshot:
        start = datetime(2024, 6, 1, 12, tzinfo=timezone.utc)
        forecast = tuple(
            ForecastPoint(
                timestamp=start + timedelta(hours=3 * idx),
                condition_code=500,
                condition_icon="10d",
                condition_main="Rain",
                temp_c=temp - idx,
                precipitation_probability=0.4,
            )
            for idx in range(forecast_steps)
        )
        return WeatherSnapshot(
            location_name=name,
            coordinates=Coordinates(lat=48.85, lon=2.35),
            condition_code=code,
            condition_icon=icon,
            condition_description="clear sky",
            temp_c=temp,
            feels_like_c=temp - 1,
            temp_min_c=temp - 3,
            temp_max_c=temp + 2,
            humidity_pct=60,
            wind_speed_ms=4.1,
            pressure_hpa=1013,
            visibility_m=10000,
            observed_at=start,
            forecast=forecast,
            aqi=aqi,
        )

    return factory
