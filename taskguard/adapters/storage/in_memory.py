"""In-memory key-value store.

Notes:
- Per-process only: running multiple workers gives each its own state.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import threading

from taskguard.adapters.storage.base import AbstractKeyValueStore


class InMemoryKeyValueStore(AbstractKeyValueStore):
    """Dictionary-backed store, lost on restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._lock = threading.RLock()
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not key:
            raise ValueError("key must be a non-empty string")
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)
