from __future__ import annotations

import math

import pytest

from skyglass.units import (
    UnitConverter,
    aqi_label,
    convert_wind_speed,
    fahrenheit_to_celsius,
    format_pressure,
    format_temperature,
    format_visibility,
    format_wind_speed,
    round_half_away,
)


@pytest.mark.parametrize(
    "value, expected",
    [(2.5, 3), (-2.5, -3), (2.4, 2), (-2.4, -2), (0.5, 1), (-0.5, -1), (0, 0)],
)
def test_round_half_away_from_zero(value, expected):
    assert round_half_away(value) == expected


def test_temperature_in_celsius_and_fahrenheit():
    assert format_temperature(21.6, "C") == 22
    assert format_temperature(0, "F") == 32
    assert format_temperature(100, "F") == 212
    assert format_temperature(-40, "F") == -40
    assert format_temperature(36.6, "F") == 98


def test_fahrenheit_matches_formula_over_range():
    for tenths in range(-600, 601, 7):
        celsius = tenths / 10
        assert format_temperature(celsius, "F") == round_half_away(celsius * 9 / 5 + 32)
        assert abs(fahrenheit_to_celsius(format_temperature(celsius, "F")) - round_half_away(celsius)) <= 1


def test_wind_speed_units():
    assert format_wind_speed(10, "km/h") == "36.0"
    assert format_wind_speed(10, "mph") == "22.4"
    assert format_wind_speed(4.14, "m/s") == "4.1"
    assert format_wind_speed(3, "m/s") == "3.0"


@pytest.mark.parametrize("unit", ["m/s", "km/h", "mph"])
def test_wind_conversion_is_monotonic(unit):
    speeds = [step * 0.25 for step in range(0, 200)]
    converted = [convert_wind_speed(v, unit) for v in speeds]
    assert converted == sorted(converted)
    assert all(later > earlier for earlier, later in zip(converted, converted[1:]))


def test_pressure_units():
    assert format_pressure(1013, "hPa") == "1013"
    assert format_pressure(1013, "mmHg") == "760"
    assert format_pressure(1013, "inHg") == "29.91"
    assert format_pressure(1013.0, "hPa") == "1013"
    assert format_pressure(1012.5, "hPa") == "1012.5"


def test_unknown_units_fall_back_to_metric():
    assert format_temperature(21.4, "K") == 21
    assert format_wind_speed(5, "knots") == "5.0"
    assert format_pressure(1000, "bar") == "1000"


def test_visibility_and_aqi_labels():
    assert format_visibility(10000) == "10.0 km"
    assert format_visibility(None) == "N/A"
    assert aqi_label(1) == "Good"
    assert aqi_label(5) == "Very Poor"
    assert aqi_label(None) == "N/A"


def test_converter_follows_current_settings(settings_store):
    units = UnitConverter(settings_store)
    assert units.temperature(25) == 25
    assert units.wind_speed(10) == "10.0"

    settings_store.update(temp_unit="F", wind_unit="km/h", pressure_unit="inHg")

    assert units.temperature(25) == 77
    assert units.wind_speed(10) == "36.0"
    assert units.pressure(1013) == "29.91"


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_values_do_not_raise(value):
    assert math.isnan(format_temperature(value, "C")) == math.isnan(value)
    assert format_temperature(value, "F") is not None
    assert fahrenheit_to_celsius(value) is not None
    assert format_pressure(value, "mmHg") == str(value)
    assert format_wind_speed(value, "km/h") in ("nan", "inf", "-inf")
