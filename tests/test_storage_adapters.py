"""Unit tests for the key-value storage backends."""

import json

import pytest

from taskguard.adapters.storage.in_memory import InMemoryKeyValueStore
from taskguard.adapters.storage.json_file import JsonFileKeyValueStore
from taskguard.core.errors import StorageAppError


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(tmp_path / "store.json")


def test_get_missing_key_returns_none(store) -> None:
    assert store.get("missing") is None


def test_set_then_get_and_overwrite(store) -> None:
    store.set("k", "v1")
    store.set("k", "v2")

    assert store.get("k") == "v2"


def test_delete_is_idempotent(store) -> None:
    store.set("k", "v")
    store.delete("k")
    store.delete("k")

    assert store.get("k") is None


def test_empty_key_rejected(store) -> None:
    with pytest.raises(ValueError):
        store.set("", "v")


def test_file_store_survives_new_instance(tmp_path) -> None:
    path = tmp_path / "nested" / "store.json"
    JsonFileKeyValueStore(path).set("k", "v")

    assert JsonFileKeyValueStore(path).get("k") == "v"
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}
    assert not path.with_name("store.json.tmp").exists()


def test_file_store_treats_corrupt_file_as_empty(tmp_path) -> None:
    path = tmp_path / "store.json"
    path.write_text("{corrupt", encoding="utf-8")
    store = JsonFileKeyValueStore(path)

    assert store.get("k") is None
    store.set("k", "v")
    assert store.get("k") == "v"


def test_file_store_read_error_raises_storage_error(tmp_path) -> None:
    directory = tmp_path / "is_a_dir"
    directory.mkdir()
    store = JsonFileKeyValueStore(directory)

    with pytest.raises(StorageAppError) as exc_info:
        store.get("k")

    assert exc_info.value.code == "storage_read_failed"
