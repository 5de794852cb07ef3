"""JSON-file key-value store.

All keys live in one JSON object on disk. Every write rewrites the file via a
temporary sibling and ``os.replace`` so readers never observe a partial file.

Important:
    The lock is per-process. Two processes pointing at the same file can still
    lose each other's updates; use a server-side store for that deployment.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path

from taskguard.adapters.storage.base import AbstractKeyValueStore
from taskguard.core.errors import StorageAppError

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore(AbstractKeyValueStore):
    """Persist a flat ``{key: value}`` mapping to a single JSON file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StorageAppError(
                code="storage_read_failed",
                message="Could not read key-value store file",
                details={"hint": str(exc)},
            ) from exc

        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError:
            logger.warning(
                "storage.file_malformed",
                extra={"path": str(self._path)},
            )
            return {}

        if not isinstance(data, dict):
            logger.warning(
                "storage.file_malformed",
                extra={"path": str(self._path), "type": type(data).__name__},
            )
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise StorageAppError(
                code="storage_write_failed",
                message="Could not write key-value store file",
                details={"hint": str(exc)},
            ) from exc

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        if not key:
            raise ValueError("key must be a non-empty string")
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if key in data:
                del data[key]
                self._write_all(data)
