"""Task list service.

Payload validation never raises: problems come back as a list of
human-readable messages so the caller can show them next to the form.
Tasks are kept as one JSON array in the key-value store.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from taskguard.adapters.audit.base import AbstractAuditSink, AuditLevel, NullAuditSink
from taskguard.adapters.storage.base import AbstractKeyValueStore
from taskguard.core.errors import StorageAppError
from taskguard.utils.text import escape_html

logger = logging.getLogger(__name__)

TASKS_STORAGE_KEY = "st_tasks_demo"
MAX_TITLE_CHARS = 100
MAX_DESCRIPTION_CHARS = 1000


@dataclass
class TaskValidationResult:
    ok: bool
    data: dict[str, Any]
    errors: list[str] = field(default_factory=list)


@dataclass
class TaskOperationResult:
    ok: bool
    task: dict[str, Any] | None = None
    errors: list[str] = field(default_factory=list)
    reason: str | None = None
    error: str | None = None


def _is_task(entry: Any) -> bool:
    """Stored tasks need string id, title and created_at; the rest is optional."""

    if not isinstance(entry, dict):
        return False
    if not all(isinstance(entry.get(name), str) for name in ("id", "title", "created_at")):
        return False
    if not isinstance(entry.get("description", ""), str):
        return False
    return entry.get("due_date") is None or isinstance(entry["due_date"], str)


def _parse_due_date(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def sanitize_task_payload(payload: Mapping[str, Any] | None) -> TaskValidationResult:
    """Validate, trim, truncate and HTML-escape a task payload.

    Accepted keys are ``title`` (required, max 100 chars), ``description``
    (optional, max 1000 chars) and ``due_date`` (optional ISO date or
    datetime). Over-long fields are truncated and reported.

    Args:
        payload: Raw mapping from the client.

    Returns:
        TaskValidationResult with sanitized ``data`` and any ``errors``.
    """
    payload = payload or {}
    errors: list[str] = []
    out: dict[str, Any] = {"title": "", "description": "", "due_date": None}

    title = payload.get("title")
    if not isinstance(title, str) or not title.strip():
        errors.append("Title is required.")
    else:
        title = title.strip()
        if len(title) > MAX_TITLE_CHARS:
            errors.append(f"Title too long (max {MAX_TITLE_CHARS}).")
            title = title[:MAX_TITLE_CHARS]
        out["title"] = escape_html(title)

    description = payload.get("description")
    if isinstance(description, str):
        description = description.strip()
        if len(description) > MAX_DESCRIPTION_CHARS:
            errors.append(f"Description truncated to {MAX_DESCRIPTION_CHARS} characters.")
            description = description[:MAX_DESCRIPTION_CHARS]
        out["description"] = escape_html(description)

    due_date = payload.get("due_date")
    if due_date:
        parsed = _parse_due_date(str(due_date).strip())
        if parsed is None:
            errors.append("Invalid due date.")
        else:
            out["due_date"] = parsed.isoformat()

    return TaskValidationResult(ok=not errors, data=out, errors=errors)


class TaskService:
    """Create, list and delete tasks."""

    def __init__(
        self,
        store: AbstractKeyValueStore,
        *,
        audit: AbstractAuditSink | None = None,
        storage_key: str = TASKS_STORAGE_KEY,
    ) -> None:
        self._store = store
        self._audit = audit or NullAuditSink()
        self._key = storage_key
        self._lock = threading.RLock()

    def list_tasks(self) -> list[dict[str, Any]]:
        try:
            raw = self._store.get(self._key)
        except StorageAppError:
            logger.warning("tasks.read_failed", exc_info=True)
            return []
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("tasks.malformed", extra={"storage_key": self._key})
            return []
        if not isinstance(parsed, list):
            return []
        tasks = [task for task in parsed if _is_task(task)]
        if len(tasks) != len(parsed):
            logger.warning(
                "tasks.malformed_entries_skipped",
                extra={"storage_key": self._key, "skipped": len(parsed) - len(tasks)},
            )
        return tasks

    def _save(self, tasks: list[dict[str, Any]]) -> None:
        self._store.set(self._key, json.dumps(tasks))

    def create(self, payload: Mapping[str, Any] | None) -> TaskOperationResult:
        result = sanitize_task_payload(payload)
        if not result.ok:
            self._audit.append(
                AuditLevel.WARNING,
                "task_create_validation_failed",
                {"errors": result.errors},
            )
            return TaskOperationResult(ok=False, errors=result.errors, reason="validation_failed")

        try:
            task = {
                "id": uuid.uuid4().hex,
                "title": result.data["title"],
                "description": result.data["description"],
                "due_date": result.data["due_date"],
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
            with self._lock:
                tasks = self.list_tasks()
                tasks.append(task)
                self._save(tasks)
        except Exception as exc:
            logger.exception("tasks.create_failed")
            self._audit.append(AuditLevel.ERROR, "task_create_error", {"error": str(exc)})
            return TaskOperationResult(ok=False, reason="error", error=str(exc))

        self._audit.append(AuditLevel.INFO, "task_created", {"id": task["id"], "title": task["title"]})
        return TaskOperationResult(ok=True, task=task)

    def delete(self, task_id: str) -> TaskOperationResult:
        try:
            with self._lock:
                tasks = self.list_tasks()
                remaining = [task for task in tasks if task.get("id") != task_id]
                if len(remaining) == len(tasks):
                    return TaskOperationResult(ok=False, reason="not_found")
                self._save(remaining)
        except Exception as exc:
            logger.exception("tasks.delete_failed", extra={"task_id": task_id})
            self._audit.append(AuditLevel.ERROR, "task_delete_error", {"error": str(exc)})
            return TaskOperationResult(ok=False, reason="error", error=str(exc))

        self._audit.append(AuditLevel.INFO, "task_deleted", {"id": task_id})
        return TaskOperationResult(ok=True)
