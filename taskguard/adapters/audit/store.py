"""Audit sink persisted in the key-value store.

Events are kept as a JSON array under a single key, capped at
``max_entries`` with the oldest entries evicted first. Every event is also
emitted to the application log.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Mapping

from taskguard.adapters.audit.base import AbstractAuditSink, AuditEvent, AuditLevel
from taskguard.adapters.storage.base import AbstractKeyValueStore
from taskguard.core.errors import StorageAppError

logger = logging.getLogger(__name__)

AUDIT_STORAGE_KEY = "st_audit_v1"
_EVENT_TEXT_FIELDS = ("id", "timestamp", "level", "message")


def _is_event(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    if not all(isinstance(entry.get(name), str) for name in _EVENT_TEXT_FIELDS):
        return False
    return isinstance(entry.get("meta", {}), dict)


class StoreAuditSink(AbstractAuditSink):
    """Capped audit log with read, search and clear helpers for admins."""

    def __init__(
        self,
        store: AbstractKeyValueStore,
        *,
        max_entries: int = 1000,
        storage_key: str = AUDIT_STORAGE_KEY,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._store = store
        self._max_entries = max_entries
        self._key = storage_key
        self._lock = threading.RLock()

    def _read(self) -> list[dict[str, Any]]:
        try:
            raw = self._store.get(self._key)
        except StorageAppError:
            logger.warning("audit.read_failed", extra={"storage_key": self._key}, exc_info=True)
            return []
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("audit.malformed", extra={"storage_key": self._key})
            return []
        if not isinstance(parsed, list):
            return []
        entries = [entry for entry in parsed if _is_event(entry)]
        if len(entries) != len(parsed):
            logger.warning(
                "audit.malformed_entries_skipped",
                extra={"storage_key": self._key, "skipped": len(parsed) - len(entries)},
            )
        return entries

    def _write(self, entries: list[dict[str, Any]]) -> None:
        if len(entries) > self._max_entries:
            entries = entries[-self._max_entries:]
        try:
            self._store.set(self._key, json.dumps(entries, default=str))
        except StorageAppError:
            logger.warning("audit.write_failed", extra={"storage_key": self._key}, exc_info=True)

    def append(
        self,
        level: AuditLevel | str,
        message: str,
        meta: Mapping[str, Any] | None = None,
    ) -> AuditEvent | None:
        try:
            event = AuditEvent.build(level, message, meta)
        except ValueError:
            logger.warning("audit.invalid_level", extra={"level": str(level), "audit_message": message})
            return None

        with self._lock:
            entries = self._read()
            entries.append(event.to_dict())
            self._write(entries)

        log_level = logging.INFO if event.level == AuditLevel.INFO.value else logging.WARNING
        logger.log(
            log_level,
            "audit.event",
            extra={
                "audit_id": event.id,
                "audit_level": event.level,
                "audit_message": event.message,
                "audit_meta": event.meta,
            },
        )
        return event

    def get_all(self) -> list[dict[str, Any]]:
        with self._lock:
            return self._read()

    def clear(self) -> bool:
        with self._lock:
            try:
                self._store.delete(self._key)
            except StorageAppError:
                logger.warning("audit.clear_failed", extra={"storage_key": self._key}, exc_info=True)
                return False
        return True

    def search(self, *, level: str | None = None, contains: str | None = None) -> list[dict[str, Any]]:
        """Filter events by exact level and/or case-insensitive message substring."""

        needle = contains.lower() if contains else None
        results = []
        for entry in self.get_all():
            if level and entry.get("level") != level:
                continue
            if needle and needle not in str(entry.get("message", "")).lower():
                continue
            results.append(entry)
        return results
