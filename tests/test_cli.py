from __future__ import annotations

import json

import pytest

from skyglass.cli import Dashboard, build_dashboard, main, render
from skyglass.config import AppConfig
from skyglass.storage import MemoryStore


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("SKYGLASS_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("OPENWEATHER_API_KEY", raising=False)
    return tmp_path


def test_settings_can_be_changed_and_persist(data_dir, capsys):
    assert main(["settings", "--set", "temp_unit=F", "--set", "wind_unit=mph"]) == 0
    capsys.readouterr()

    assert main(["settings"]) == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["temp_unit"] == "F"
    assert shown["wind_unit"] == "mph"
    assert shown["pressure_unit"] == "hPa"


def test_unknown_setting_is_rejected(data_dir, capsys):
    assert main(["settings", "--set", "font_size=12"]) == 2
    assert "Unknown setting" in capsys.readouterr().err


def test_history_lists_and_clears(data_dir, capsys):
    dashboard = build_dashboard(AppConfig.from_env())
    dashboard.history.record("Paris")
    dashboard.history.record("Rome")

    assert main(["history"]) == 0
    assert capsys.readouterr().out.split() == ["Rome", "Paris"]

    assert main(["history", "--clear"]) == 0
    assert capsys.readouterr().out == ""


def test_show_without_api_key_is_a_configuration_error(data_dir, capsys):
    assert main(["show", "--city", "Paris"]) == 2
    assert "OPENWEATHER_API_KEY" in capsys.readouterr().err


def test_render_uses_selected_units(make_snapshot, tmp_path):
    dashboard: Dashboard = build_dashboard(AppConfig(data_dir=tmp_path), store=MemoryStore())
    dashboard.settings.update(temp_unit="F", wind_unit="km/h", pressure_unit="mmHg")
    snapshot = make_snapshot("Paris", temp=20.0, aqi=2, forecast_steps=16)

    lines = render(snapshot, dashboard)

    assert lines[0].startswith("Paris (48.85, 2.35)")
    assert "68°F" in lines[1]
    assert "Wind 14.8 km/h" in lines[3]
    assert "Pressure 760 mmHg" in lines[4]
    assert "Visibility 10.0 km" in lines[4]
    assert lines[5].endswith("Air quality Fair")
    assert lines[-2].startswith("    Sat 68° Rain")
    assert lines[-1].startswith("    Sun")
