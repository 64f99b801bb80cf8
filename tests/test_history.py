from __future__ import annotations

import json
import logging

import pytest

from skyglass.history import HistoryTracker
from skyglass.storage import HISTORY_KEY, MemoryStore


def test_case_insensitive_dedup_keeps_most_recent(store):
    history = HistoryTracker(store)
    for name in ["Paris", "paris", "London"]:
        history.record(name)

    assert [entry.casefold() for entry in history.entries] == ["london", "paris"]
    # The latest spelling replaces the earlier one.
    assert history.entries == ["London", "paris"]


def test_capacity_keeps_last_five(store):
    history = HistoryTracker(store)
    for name in ["Oslo", "Rome", "Lima", "Cairo", "Tokyo", "Quito"]:
        history.record(name)

    assert history.entries == ["Quito", "Tokyo", "Cairo", "Lima", "Rome"]


def test_record_persists_after_each_call(store):
    history = HistoryTracker(store)
    history.record("Berlin")
    history.record("Madrid")

    assert json.loads(store.get(HISTORY_KEY)) == ["Madrid", "Berlin"]
    assert HistoryTracker(store).entries == ["Madrid", "Berlin"]


def test_clear_persists_empty_list(store):
    history = HistoryTracker(store)
    history.record("Berlin")
    history.clear()

    assert history.entries == []
    assert store.get(HISTORY_KEY) == "[]"


@pytest.mark.parametrize("raw", ["{not json", '{"a": 1}', '"Paris"', "42", "null"])
def test_corrupt_history_loads_empty(raw, caplog):
    with caplog.at_level(logging.WARNING, logger="skyglass.history"):
        history = HistoryTracker(MemoryStore({HISTORY_KEY: raw}))

    assert history.entries == []
    assert any(record.levelno == logging.WARNING for record in caplog.records)


def test_non_string_items_are_dropped():
    history = HistoryTracker(MemoryStore({HISTORY_KEY: json.dumps(["Paris", 3, None, "", "Rome"])}))
    assert history.entries == ["Paris", "Rome"]


def test_blank_names_are_rejected(store):
    history = HistoryTracker(store)
    with pytest.raises(ValueError):
        history.record("  ")
    assert history.entries == []


def test_entries_returns_a_copy(store):
    history = HistoryTracker(store)
    history.record("Paris")
    history.entries.append("Mutated")

    assert history.entries == ["Paris"]


def test_persisted_case_duplicates_are_collapsed_on_load():
    store = MemoryStore({HISTORY_KEY: json.dumps(["Paris", "paris", "PARIS", "Rome", "rome"])})
    history = HistoryTracker(store)

    assert history.entries == ["Paris", "Rome"]

    history.record("London")

    folded = [entry.casefold() for entry in history.entries]
    assert folded == ["london", "paris", "rome"]
    assert len(folded) == len(set(folded))


def test_loaded_list_is_truncated_to_capacity():
    names = ["Oslo", "Rome", "Lima", "Cairo", "Tokyo", "Quito", "Lagos"]
    history = HistoryTracker(MemoryStore({HISTORY_KEY: json.dumps(names)}))

    assert history.entries == names[:5]
