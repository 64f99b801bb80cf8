from __future__ import annotations

import json

from skyglass.history import HistoryTracker
from skyglass.settings_store import SettingsStore
from skyglass.storage import LAST_CITY_KEY, JsonFileStore


def test_values_survive_reopening(tmp_path):
    path = tmp_path / "state" / "state.json"
    store = JsonFileStore(path)
    store.set(LAST_CITY_KEY, "Oslo")
    HistoryTracker(store).record("Oslo")
    SettingsStore(store).update(temp_unit="F")

    reopened = JsonFileStore(path)

    assert reopened.get(LAST_CITY_KEY) == "Oslo"
    assert HistoryTracker(reopened).entries == ["Oslo"]
    assert SettingsStore(reopened).settings.temp_unit == "F"
    assert list(tmp_path.joinpath("state").iterdir()) == [path]


def test_remove_deletes_key_on_disk(tmp_path):
    path = tmp_path / "state.json"
    store = JsonFileStore(path)
    store.set("token", "abc")
    store.remove("token")
    store.remove("missing")

    assert json.loads(path.read_text(encoding="utf-8")) == {}


def test_corrupt_file_starts_empty(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    store = JsonFileStore(path)

    assert store.get(LAST_CITY_KEY) is None
    store.set(LAST_CITY_KEY, "Rome")
    assert json.loads(path.read_text(encoding="utf-8")) == {LAST_CITY_KEY: "Rome"}


def test_non_mapping_file_starts_empty(tmp_path):
    path = tmp_path / "state.json"
    path.write_text('["Paris"]', encoding="utf-8")

    assert JsonFileStore(path).get(LAST_CITY_KEY) is None
