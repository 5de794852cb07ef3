"""HTTP tests for attempt-record and audit-log administration."""

from __future__ import annotations


def _fail_login(client, username="alice"):
    client.post("/v1/auth/login", json={"username": username, "password": "wrong"})


class TestAdminAuth:
    def test_missing_key_is_forbidden(self, client):
        resp = client.get("/v1/admin/attempts")

        assert resp.status_code == 403
        assert "Missing API key" in resp.json()["detail"]

    def test_invalid_key_is_forbidden(self, client):
        resp = client.get("/v1/admin/audit", headers={"X-API-Key": "nope"})

        assert resp.status_code == 403

    def test_any_configured_key_works(self, client):
        resp = client.get("/v1/admin/attempts", headers={"X-API-Key": "other-admin-key"})

        assert resp.status_code == 200


class TestAttempts:
    def test_lists_recorded_failures(self, client, admin_headers):
        _fail_login(client)
        _fail_login(client, "ALICE")

        body = client.get("/v1/admin/attempts", headers=admin_headers).json()

        assert list(body) == ["alice"]
        assert len(body["alice"]["attempts"]) == 2
        assert body["alice"]["blocked_until"] is None

    def test_reset_unblocks_user(self, client, admin_headers):
        for _ in range(5):
            _fail_login(client)
        assert client.post(
            "/v1/auth/login", json={"username": "alice", "password": "1234"}
        ).status_code == 429

        resp = client.delete("/v1/admin/attempts/Alice", headers=admin_headers)

        assert resp.json() == {"ok": True, "username": "alice"}
        assert client.get("/v1/admin/attempts", headers=admin_headers).json() == {}
        assert client.post(
            "/v1/auth/login", json={"username": "alice", "password": "1234"}
        ).status_code == 200

    def test_reset_unknown_user_is_ok(self, client, admin_headers):
        resp = client.delete("/v1/admin/attempts/ghost", headers=admin_headers)

        assert resp.status_code == 200


class TestAudit:
    def test_filters_by_level_and_substring(self, client, admin_headers):
        _fail_login(client)
        client.post("/v1/auth/login", json={"username": "bob", "password": "1234"})

        warnings = client.get(
            "/v1/admin/audit", params={"level": "warning"}, headers=admin_headers
        ).json()
        assert {e["message"] for e in warnings} == {"failed_login_recorded", "user_login_failed"}

        success = client.get(
            "/v1/admin/audit", params={"contains": "LOGIN_SUCCESS"}, headers=admin_headers
        ).json()
        assert [e["meta"]["username"] for e in success] == ["bob"]

    def test_invalid_level_is_rejected(self, client, admin_headers):
        resp = client.get("/v1/admin/audit", params={"level": "loud"}, headers=admin_headers)

        assert resp.status_code == 422

    def test_clear(self, client, admin_headers):
        _fail_login(client)

        assert client.delete("/v1/admin/audit", headers=admin_headers).json() == {"ok": True}
        assert client.get("/v1/admin/audit", headers=admin_headers).json() == []

    def test_unhandled_error_is_audited(self, container, admin_headers, monkeypatch):
        from fastapi.testclient import TestClient

        from taskguard.core.app_factory import create_app
        from taskguard.core.config import settings

        def explode():
            raise RuntimeError("kaboom")

        monkeypatch.setattr(container.tasks, "list_tasks", explode)
        client = TestClient(
            create_app(settings, container=container, configure_logs=False),
            raise_server_exceptions=False,
        )

        assert client.get("/v1/tasks").status_code == 500
        events = client.get(
            "/v1/admin/audit", params={"contains": "unhandled"}, headers=admin_headers
        ).json()
        assert events[-1]["meta"]["path"] == "/v1/tasks"


def test_malformed_audit_entries_are_skipped(client, container, admin_headers):
    container.store.set(
        "st_audit_v1",
        '[{"level": "info"}, "junk", {"id": "1", "timestamp": "t", "level": "info",'
        ' "message": "kept", "meta": {}}]',
    )

    resp = client.get("/v1/admin/audit", headers=admin_headers)

    assert resp.status_code == 200
    assert [e["message"] for e in resp.json()] == ["kept"]
