"""Tests for the file-backed key-value store."""

from __future__ import annotations

from opsdash.storage.file_storage import FileKeyValueStore


def test_set_get_remove(tmp_path):
    store = FileKeyValueStore(tmp_path)
    assert store.get("authToken") is None

    store.set("authToken", "abc")
    assert store.get("authToken") == "abc"

    store.remove("authToken")
    assert store.get("authToken") is None
    store.remove("authToken")  # removing a missing key is a no-op


def test_values_survive_reopen(tmp_path):
    FileKeyValueStore(tmp_path).set("permissions", '["letter.view"]')
    assert FileKeyValueStore(tmp_path).get("permissions") == '["letter.view"]'


def test_keys_by_prefix(tmp_path):
    store = FileKeyValueStore(tmp_path)
    store.set("swr_notes_2025_CH1", "{}")
    store.set("swr_notes_2024_CH1", "{}")
    store.set("authToken", "t")
    assert store.keys("swr_notes_2025") == ["swr_notes_2025_CH1"]
    assert len(store.keys()) == 3


def test_corrupt_file_is_treated_as_empty(tmp_path):
    store = FileKeyValueStore(tmp_path)
    store.path.write_text("{not json")
    assert FileKeyValueStore(tmp_path).get("authToken") is None


def test_no_temp_file_left_behind(tmp_path):
    state_dir = tmp_path / "kv"
    store = FileKeyValueStore(state_dir)
    store.set("k", "v")
    assert [p.name for p in state_dir.iterdir()] == ["state.json"]
