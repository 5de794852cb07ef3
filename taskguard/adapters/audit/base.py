"""Audit sink interface and event type."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping


class AuditLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class AuditEvent:
    """A single append-only audit entry.

    Attributes:
        id: Random UUID4 string.
        timestamp: ISO-8601 UTC instant the event was appended.
        level: Severity (``info``, ``warning`` or ``error``).
        message: Short event name, e.g. ``failed_login_recorded``.
        meta: Free-form structured context.
    """

    id: str
    timestamp: str
    level: str
    message: str
    meta: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        level: AuditLevel | str,
        message: str,
        meta: Mapping[str, Any] | None = None,
    ) -> "AuditEvent":
        return cls(
            id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=AuditLevel(level).value,
            message=str(message) or "event",
            meta=dict(meta or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class AbstractAuditSink(ABC):
    """Append-only event log.

    ``append`` must never raise to the caller; sinks log and drop on failure.
    """

    @abstractmethod
    def append(
        self,
        level: AuditLevel | str,
        message: str,
        meta: Mapping[str, Any] | None = None,
    ) -> AuditEvent | None:
        raise NotImplementedError


class NullAuditSink(AbstractAuditSink):
    """Sink that builds events and keeps nothing."""

    def append(
        self,
        level: AuditLevel | str,
        message: str,
        meta: Mapping[str, Any] | None = None,
    ) -> AuditEvent | None:
        return AuditEvent.build(level, message, meta)
