"""Pydantic schemas for administrative inspection endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from taskguard.services.attempt_store import AttemptRecord
from taskguard.services.login_throttle import ms_to_datetime


class AttemptRecordOut(BaseModel):
    attempts: List[datetime] = Field(
        default_factory=list, description="Recorded failure instants, oldest first."
    )
    blocked_until: datetime | None = Field(None, description="Stored block expiry, possibly in the past.")

    @classmethod
    def from_record(cls, record: AttemptRecord) -> "AttemptRecordOut":
        return cls(
            attempts=[ms_to_datetime(ts) for ts in record.attempts],
            blocked_until=ms_to_datetime(record.blocked_until) if record.blocked_until is not None else None,
        )


class AuditEventOut(BaseModel):
    id: str
    timestamp: str
    level: str
    message: str
    meta: Dict[str, Any] = Field(default_factory=dict)
