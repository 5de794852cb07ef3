"""Opaque session tokens persisted in the key-value store."""

from __future__ import annotations

import json
import logging
import threading
import uuid

from taskguard.adapters.audit.base import AbstractAuditSink, AuditLevel, NullAuditSink
from taskguard.adapters.storage.base import AbstractKeyValueStore
from taskguard.core.errors import StorageAppError

logger = logging.getLogger(__name__)

SESSION_STORAGE_KEY = "st_sessions_v1"


class SessionManager:
    """Map random tokens to usernames.

    Tokens are UUID4 strings. A storage failure while establishing a session
    is propagated because the caller cannot hand out a token nobody can
    resolve; reads degrade to "no session".
    """

    def __init__(
        self,
        store: AbstractKeyValueStore,
        *,
        audit: AbstractAuditSink | None = None,
        storage_key: str = SESSION_STORAGE_KEY,
    ) -> None:
        self._store = store
        self._audit = audit or NullAuditSink()
        self._key = storage_key
        self._lock = threading.RLock()

    def _read(self) -> dict[str, str]:
        try:
            raw = self._store.get(self._key)
        except StorageAppError:
            logger.warning("sessions.read_failed", exc_info=True)
            return {}
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("sessions.malformed", extra={"storage_key": self._key})
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def establish(self, username: str) -> str:
        token = str(uuid.uuid4())
        with self._lock:
            sessions = self._read()
            sessions[token] = username
            self._store.set(self._key, json.dumps(sessions))
        self._audit.append(AuditLevel.INFO, "session_set", {"username": username})
        return token

    def resolve(self, token: str | None) -> str | None:
        if not token:
            return None
        return self._read().get(token)

    def clear(self, token: str | None) -> str | None:
        """Drop ``token`` and return the username it belonged to."""

        if not token:
            return None
        with self._lock:
            sessions = self._read()
            username = sessions.pop(token, None)
            if username is None:
                return None
            try:
                self._store.set(self._key, json.dumps(sessions))
            except StorageAppError:
                logger.warning("sessions.clear_failed", exc_info=True)
        self._audit.append(AuditLevel.INFO, "session_cleared", {"username": username})
        return username
