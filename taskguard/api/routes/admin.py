from __future__ import annotations

from typing import Annotated, Dict, List

from fastapi import APIRouter, Depends, Query

from taskguard.adapters.audit.base import AuditLevel
from taskguard.adapters.audit.store import StoreAuditSink
from taskguard.core.auth import verify_api_key
from taskguard.core.dependencies import get_audit_sink, get_login_throttle
from taskguard.schemas.admin import AttemptRecordOut, AuditEventOut
from taskguard.services.attempt_store import normalize_username
from taskguard.services.login_throttle import LoginThrottle

router = APIRouter(tags=["Admin"], dependencies=[Depends(verify_api_key)])

ThrottleDep = Annotated[LoginThrottle, Depends(get_login_throttle)]
AuditDep = Annotated[StoreAuditSink, Depends(get_audit_sink)]


@router.get("/admin/attempts", response_model=Dict[str, AttemptRecordOut])
def list_attempts(throttle: ThrottleDep) -> Dict[str, AttemptRecordOut]:
    """Return every stored attempt record keyed by normalized username."""

    return {
        username: AttemptRecordOut.from_record(record)
        for username, record in throttle.get_all().items()
    }


@router.delete("/admin/attempts/{username}")
def reset_attempts(username: str, throttle: ThrottleDep) -> dict:
    throttle.reset_attempts(username)
    return {"ok": True, "username": normalize_username(username)}


@router.get("/admin/audit", response_model=List[AuditEventOut])
def list_audit_events(
    audit: AuditDep,
    level: Annotated[AuditLevel | None, Query(description="Exact level filter.")] = None,
    contains: Annotated[str | None, Query(description="Case-insensitive message substring.")] = None,
) -> List[AuditEventOut]:
    events = audit.search(level=level.value if level else None, contains=contains)
    return [AuditEventOut(**event) for event in events]


@router.delete("/admin/audit")
def clear_audit_events(audit: AuditDep) -> dict:
    return {"ok": audit.clear()}
