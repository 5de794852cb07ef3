"""Durable per-username storage of failed login attempts.

All records share one JSON blob in the key-value store::

    {"alice": {"attempts": [1700000000000, ...], "blockedUntil": 1700000900000}}

Instants are UNIX epoch milliseconds. Reads never fail: malformed data is
treated as "no record". Writes never raise: failures are logged and dropped.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any

from taskguard.adapters.storage.base import AbstractKeyValueStore
from taskguard.core.errors import StorageAppError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "st_auth_attempts_v1"

# 9999-12-31T23:59:59.999Z, the last instant a datetime can hold
MAX_INSTANT_MS = 253_402_300_799_999


def normalize_username(username: str | None) -> str:
    """Trim and lower-case a username for use as a storage key."""

    normalized = str(username or "").strip().lower()
    return normalized or "unknown"


@dataclass
class AttemptRecord:
    """Recent failed-attempt instants and optional block expiry (epoch ms)."""

    attempts: list[int] = field(default_factory=list)
    blocked_until: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"attempts": list(self.attempts), "blockedUntil": self.blocked_until}

    @classmethod
    def from_dict(cls, data: Any) -> "AttemptRecord":
        """Parse a persisted record, returning an empty one for bad shapes."""

        if not isinstance(data, dict):
            return cls()

        raw_attempts = data.get("attempts")
        attempts: list[int] = []
        if isinstance(raw_attempts, list):
            attempts = [int(ts) for ts in raw_attempts if _is_instant(ts)]

        raw_blocked = data.get("blockedUntil")
        blocked_until = int(raw_blocked) if _is_instant(raw_blocked) else None
        return cls(attempts=attempts, blocked_until=blocked_until)


def _is_instant(value: Any) -> bool:
    """True for a finite, non-negative epoch-ms number a datetime can represent."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return 0 <= value <= MAX_INSTANT_MS


class AttemptStore:
    """Keyed AttemptRecord storage normalized by username."""

    def __init__(
        self,
        store: AbstractKeyValueStore,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self._store = store
        self._key = storage_key

    @property
    def storage_key(self) -> str:
        return self._key

    def _read_all(self, *, strict: bool = False) -> dict[str, Any]:
        try:
            raw = self._store.get(self._key)
        except StorageAppError:
            if strict:
                raise
            logger.warning(
                "attempt_store.read_failed",
                extra={"storage_key": self._key},
                exc_info=True,
            )
            return {}

        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("attempt_store.malformed", extra={"storage_key": self._key})
            return {}
        if not isinstance(parsed, dict):
            logger.warning(
                "attempt_store.malformed",
                extra={"storage_key": self._key, "type": type(parsed).__name__},
            )
            return {}
        return parsed

    def _write_all(self, data: dict[str, Any]) -> None:
        try:
            self._store.set(self._key, json.dumps(data))
        except StorageAppError:
            logger.warning(
                "attempt_store.save_failed",
                extra={"storage_key": self._key, "records": len(data)},
                exc_info=True,
            )

    def load(self, username: str | None, *, strict: bool = False) -> AttemptRecord:
        """Return the stored record or a fresh empty one.

        Args:
            username: Raw username; normalized before lookup.
            strict: Propagate ``StorageAppError`` on I/O failure instead of
                treating it as "no record". Malformed data is always empty.
        """

        key = normalize_username(username)
        return AttemptRecord.from_dict(self._read_all(strict=strict).get(key))

    def save(self, username: str | None, record: AttemptRecord) -> None:
        """Persist ``record``, fully replacing any prior value."""

        key = normalize_username(username)
        data = self._read_all()
        data[key] = record.to_dict()
        self._write_all(data)

    def delete(self, username: str | None) -> bool:
        """Remove the record. Returns whether one existed."""

        key = normalize_username(username)
        data = self._read_all()
        if key not in data:
            return False
        del data[key]
        self._write_all(data)
        return True

    def load_all_raw(self) -> dict[str, AttemptRecord]:
        return {
            str(name): AttemptRecord.from_dict(value)
            for name, value in self._read_all().items()
        }
