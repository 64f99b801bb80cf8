from __future__ import annotations

import json
import logging

import pytest

from skyglass.settings_store import Settings, SettingsStore
from skyglass.storage import SETTINGS_KEY, MemoryStore


def test_first_run_uses_and_persists_defaults(store):
    settings = SettingsStore(store)

    assert settings.settings == Settings()
    assert json.loads(store.get(SETTINGS_KEY)) == {
        "tempUnit": "C",
        "windUnit": "m/s",
        "pressureUnit": "hPa",
        "themeMode": "auto",
        "themeBackground": "default",
        "mapLayer": "temperature",
        "mapStyle": "streets",
        "language": "en",
        "homeCity": "",
    }


def test_partial_settings_are_merged_over_defaults():
    store = MemoryStore({SETTINGS_KEY: json.dumps({"tempUnit": "F"})})

    loaded = SettingsStore(store).load()

    assert loaded.temp_unit == "F"
    assert loaded == Settings(temp_unit="F")


@pytest.mark.parametrize("raw", ["{oops", "[1, 2]", '"F"', "null", "17"])
def test_corrupt_settings_fall_back_to_defaults(raw, caplog):
    store = MemoryStore({SETTINGS_KEY: raw})

    with caplog.at_level(logging.WARNING, logger="skyglass.settings_store"):
        settings = SettingsStore(store)

    assert settings.settings == Settings()
    assert any(record.levelno == logging.WARNING for record in caplog.records)


def test_unknown_and_null_fields_are_ignored():
    payload = {"windUnit": "mph", "homeCity": None, "fontSize": 14, "language": 3}
    store = MemoryStore({SETTINGS_KEY: json.dumps(payload)})

    loaded = SettingsStore(store).settings

    assert loaded.wind_unit == "mph"
    assert loaded.home_city == ""
    assert loaded.language == "en"


def test_update_merges_persists_and_is_visible(store):
    settings = SettingsStore(store)

    settings.update(pressure_unit="mmHg", home_city="Oslo")

    assert settings.settings.pressure_unit == "mmHg"
    assert settings.settings.temp_unit == "C"
    assert SettingsStore(store).settings.home_city == "Oslo"


def test_round_trip_through_store(store):
    settings = SettingsStore(store)
    settings.update(temp_unit="F", map_style="dark", theme_mode="manual", theme_background="slate")

    assert SettingsStore(store).load() == settings.settings


def test_update_rejects_unknown_fields(settings_store):
    with pytest.raises(TypeError):
        settings_store.update(font_size="14")


def test_listeners_see_previous_and_current(settings_store):
    seen = []
    unsubscribe = settings_store.subscribe(lambda previous, current: seen.append((previous.temp_unit, current.temp_unit)))

    settings_store.update(temp_unit="F")
    unsubscribe()
    settings_store.update(temp_unit="C")

    assert seen == [("C", "F")]


def test_modal_toggle_is_not_persisted(store):
    settings = SettingsStore(store)
    before = store.get(SETTINGS_KEY)

    assert settings.toggle_modal() is True
    assert settings.modal_open is True
    assert settings.toggle_modal() is False
    assert store.get(SETTINGS_KEY) == before
