"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

from taskguard.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    redact,
    set_request_id,
)


def _logger_with_stream(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_api_keys():
    """Ensure SensitiveDataFilter redacts API key fields."""
    logger, stream = _logger_with_stream("test_redaction")

    logger.info(
        "test_event",
        extra={
            "api_key": "sk-secret-123",
            "x-api-key": "another-secret",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()
    assert "sk-secret-123" not in output
    assert "another-secret" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_credentials_and_sessions():
    """Passwords and session tokens never reach the log line."""
    logger, stream = _logger_with_stream("test_credential_redaction")

    logger.info(
        "login_event",
        extra={
            "username": "alice",
            "password": "hunter2",
            "session_token": "6f1c2a0e-token",
        },
    )

    output = json.loads(stream.getvalue())
    assert output["username"] == "alice"
    assert output["password"] == "[REDACTED]"
    assert output["session_token"] == "[REDACTED]"


def test_sensitive_filter_allows_safe_fields():
    """Verify safe fields pass through unmodified."""
    logger, stream = _logger_with_stream("test_safe_fields")

    logger.info(
        "safe_event",
        extra={
            "route": "/v1/tasks",
            "status": 200,
            "duration_ms": 150.5,
        },
    )

    output = stream.getvalue()
    assert "/v1/tasks" in output
    assert "200" in output
    assert "[REDACTED]" not in output


def test_sensitive_filter_redacts_nested_dicts():
    """Ensure nested sensitive fields are redacted."""
    logger, stream = _logger_with_stream("test_nested")

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "X-Session-Token": "secret-token",
                "user-agent": "pytest",
            },
            "audit_meta": {"username": "alice", "attempts_15min": 3},
        },
    )

    output = stream.getvalue()
    assert "secret-token" not in output
    assert "[REDACTED]" in output
    assert "pytest" in output
    assert "attempts_15min" in output


def test_request_id_is_attached_from_context():
    logger, stream = _logger_with_stream("test_request_id")
    set_request_id("req-123")
    try:
        logger.info("with_context")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "req-123"


def test_redact_handles_lists_and_scalars():
    data = [{"token": "abc", "ok": True}, "plain"]

    assert redact(data) == [{"token": "[REDACTED]", "ok": True}, "plain"]
    assert redact("value") == "value"
