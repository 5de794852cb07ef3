"""Contact directory CRUD over the key-value store.

Contacts are stored as one JSON object keyed by id. Names are trimmed and
must be unique (compared case-sensitively, as stored).
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from typing import Any

from taskguard.adapters.audit.base import AbstractAuditSink, AuditLevel, NullAuditSink
from taskguard.adapters.storage.base import AbstractKeyValueStore
from taskguard.core.errors import (
    ConflictAppError,
    NotFoundAppError,
    ValidationAppError,
)

logger = logging.getLogger(__name__)

CONTACTS_STORAGE_KEY = "st_contacts_v1"


def _clean_name(name: str | None) -> str:
    cleaned = str(name or "").strip()
    if not cleaned:
        raise ValidationAppError(
            code="contact_name_required",
            message="Contact name is required",
            details={"errors": ["Name is required."]},
        )
    return cleaned


def _clean_age(age: Any) -> int:
    if isinstance(age, bool) or not isinstance(age, int) or age < 0:
        raise ValidationAppError(
            code="contact_age_invalid",
            message="Contact age must be a non-negative integer",
            details={"errors": ["Age must be a non-negative integer."]},
        )
    return age


class ContactService:
    """Create, read, update, delete and search contacts."""

    def __init__(
        self,
        store: AbstractKeyValueStore,
        *,
        audit: AbstractAuditSink | None = None,
        storage_key: str = CONTACTS_STORAGE_KEY,
    ) -> None:
        self._store = store
        self._audit = audit or NullAuditSink()
        self._key = storage_key
        self._lock = threading.RLock()

    def _read(self) -> dict[str, dict[str, Any]]:
        """Load all contacts keyed by id.

        ``StorageAppError`` is not caught here: every write starts from this
        read, so degrading to an empty directory would let the next write
        wipe the stored contacts. The error handler answers 503 instead.
        """
        raw = self._store.get(self._key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("contacts.malformed", extra={"storage_key": self._key})
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, dict)}

    def _write(self, contacts: dict[str, dict[str, Any]]) -> None:
        self._store.set(self._key, json.dumps(contacts))

    def _ensure_unique(self, contacts: dict[str, dict[str, Any]], name: str, *, exclude_id: str | None = None) -> None:
        for contact_id, contact in contacts.items():
            if contact_id != exclude_id and contact.get("name") == name:
                raise ConflictAppError(
                    code="contact_name_taken",
                    message=f"A contact named '{name}' already exists",
                    details={"resource_id": contact_id},
                )

    def create(self, name: str | None, age: Any) -> dict[str, Any]:
        cleaned_name = _clean_name(name)
        cleaned_age = _clean_age(age)
        with self._lock:
            contacts = self._read()
            self._ensure_unique(contacts, cleaned_name)
            contact = {"id": uuid.uuid4().hex, "name": cleaned_name, "age": cleaned_age}
            contacts[contact["id"]] = contact
            self._write(contacts)
        self._audit.append(AuditLevel.INFO, "contact_created", {"id": contact["id"]})
        return contact

    def list_contacts(self) -> list[dict[str, Any]]:
        return list(self._read().values())

    def get(self, contact_id: str) -> dict[str, Any]:
        contact = self._read().get(contact_id)
        if contact is None:
            raise NotFoundAppError(
                code="contact_not_found",
                message="Contact not found",
                details={"resource_id": contact_id},
            )
        return contact

    def update(self, contact_id: str, name: str | None, age: Any) -> dict[str, Any]:
        cleaned_name = _clean_name(name)
        cleaned_age = _clean_age(age)
        with self._lock:
            contacts = self._read()
            if contact_id not in contacts:
                raise NotFoundAppError(
                    code="contact_not_found",
                    message="Contact not found",
                    details={"resource_id": contact_id},
                )
            self._ensure_unique(contacts, cleaned_name, exclude_id=contact_id)
            contact = {"id": contact_id, "name": cleaned_name, "age": cleaned_age}
            contacts[contact_id] = contact
            self._write(contacts)
        self._audit.append(AuditLevel.INFO, "contact_updated", {"id": contact_id})
        return contact

    def delete(self, contact_id: str) -> dict[str, Any]:
        with self._lock:
            contacts = self._read()
            contact = contacts.pop(contact_id, None)
            if contact is None:
                raise NotFoundAppError(
                    code="contact_not_found",
                    message="Contact not found",
                    details={"resource_id": contact_id},
                )
            self._write(contacts)
        self._audit.append(AuditLevel.INFO, "contact_deleted", {"id": contact_id})
        return contact

    def find_by_name(self, name: str | None) -> list[dict[str, Any]]:
        wanted = str(name or "").strip()
        return [c for c in self._read().values() if c.get("name") == wanted]

