"""Unit tests for audit sinks."""

import json
import logging

import pytest

from taskguard.adapters.audit.base import AuditEvent, AuditLevel, NullAuditSink
from taskguard.adapters.audit.store import StoreAuditSink


def test_null_sink_builds_event_without_storing(kv_store) -> None:
    event = NullAuditSink().append("info", "app_started", {"a": 1})

    assert isinstance(event, AuditEvent)
    assert event.level == "info"
    assert event.meta == {"a": 1}
    assert kv_store.get("st_audit_v1") is None


def test_append_persists_full_event(audit_sink: StoreAuditSink, kv_store) -> None:
    event = audit_sink.append(AuditLevel.WARNING, "user_login_failed", {"username": "alice"})

    stored = json.loads(kv_store.get("st_audit_v1"))
    assert stored == [event.to_dict()]
    assert set(stored[0]) == {"id", "timestamp", "level", "message", "meta"}
    assert stored[0]["level"] == "warning"


def test_events_keep_append_order(audit_sink: StoreAuditSink) -> None:
    for i in range(3):
        audit_sink.append("info", f"event_{i}")

    assert [e["message"] for e in audit_sink.get_all()] == ["event_0", "event_1", "event_2"]


def test_cap_evicts_oldest_first(kv_store) -> None:
    sink = StoreAuditSink(kv_store, max_entries=3)
    for i in range(5):
        sink.append("info", f"event_{i}")

    assert [e["message"] for e in sink.get_all()] == ["event_2", "event_3", "event_4"]


def test_search_by_level_and_substring(audit_sink: StoreAuditSink) -> None:
    audit_sink.append("info", "user_login_success")
    audit_sink.append("warning", "user_login_failed")
    audit_sink.append("warning", "task_create_validation_failed")

    assert len(audit_sink.search(level="warning")) == 2
    assert [e["message"] for e in audit_sink.search(contains="LOGIN")] == [
        "user_login_success",
        "user_login_failed",
    ]
    assert [e["message"] for e in audit_sink.search(level="warning", contains="task")] == [
        "task_create_validation_failed"
    ]


def test_clear_removes_everything(audit_sink: StoreAuditSink) -> None:
    audit_sink.append("info", "x")

    assert audit_sink.clear() is True
    assert audit_sink.get_all() == []


def test_invalid_level_is_dropped(audit_sink: StoreAuditSink) -> None:
    assert audit_sink.append("critical", "x") is None
    assert audit_sink.get_all() == []


def test_malformed_log_is_reset_on_append(audit_sink: StoreAuditSink, kv_store) -> None:
    kv_store.set("st_audit_v1", '{"not": "a list"}')

    audit_sink.append("info", "after_corruption")

    assert [e["message"] for e in audit_sink.get_all()] == ["after_corruption"]


def test_warning_events_are_logged_at_warning(audit_sink: StoreAuditSink, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="taskguard.adapters.audit.store"):
        audit_sink.append("warning", "login_blocked_attempt", {"username": "alice"})

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.audit_message == "login_blocked_attempt"


def test_invalid_max_entries() -> None:
    with pytest.raises(ValueError):
        StoreAuditSink(None, max_entries=0)  # type: ignore[arg-type]


def test_entries_missing_fields_are_skipped(audit_sink: StoreAuditSink, kv_store) -> None:
    kv_store.set("st_audit_v1", json.dumps([{"level": "info"}, {"id": "x", "meta": "nope"}]))

    audit_sink.append("info", "after")

    assert [e["message"] for e in audit_sink.get_all()] == ["after"]
