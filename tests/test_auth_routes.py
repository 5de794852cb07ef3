"""HTTP tests for the login, logout and session endpoints."""

from __future__ import annotations


def _login(client, username="alice", password="1234"):
    return client.post("/v1/auth/login", json={"username": username, "password": password})


def test_login_success_returns_session_token(client):
    resp = _login(client, "  Alice ")

    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["username"] == "alice"
    assert body["session_token"]


def test_wrong_password_returns_401_with_counters(client):
    resp = _login(client, password="nope")

    assert resp.status_code == 401
    body = resp.json()
    assert body["ok"] is False
    assert body["error"] == "invalid_credentials"
    assert body["attempts_15m"] == 1
    assert body["blocked"] is False


def test_fifth_failure_reports_block_then_429(client):
    for _ in range(4):
        assert _login(client, password="nope").status_code == 401

    fifth = _login(client, password="nope")
    assert fifth.status_code == 401
    assert fifth.json()["blocked"] is True
    assert fifth.json()["block_reason"] == "TIER_15MIN"
    assert fifth.json()["blocked_until"] is not None

    refused = _login(client, password="1234")
    assert refused.status_code == 429
    body = refused.json()
    assert body["error"] == "temporarily_blocked"
    assert body["unlock_at"] is not None
    assert body["session_token"] is None
    assert 0 < int(refused.headers["Retry-After"]) <= 15 * 60


def test_block_expires_with_clock(client, live_clock):
    for _ in range(5):
        _login(client, password="nope")

    live_clock.advance(minutes=16)

    assert _login(client).status_code == 200


def test_login_validation_error(client):
    resp = client.post("/v1/auth/login", json={"username": "", "password": "x"})

    assert resp.status_code == 422


def test_session_and_logout(client):
    token = _login(client).json()["session_token"]
    headers = {"X-Session-Token": token}

    session = client.get("/v1/auth/session", headers=headers)
    assert session.status_code == 200
    assert session.json() == {"username": "alice"}

    logout = client.post("/v1/auth/logout", headers=headers)
    assert logout.json() == {"ok": True, "username": "alice"}

    after = client.get("/v1/auth/session", headers=headers)
    assert after.status_code == 401
    assert after.json()["detail"] == "Not logged in."


def test_session_requires_token(client):
    assert client.get("/v1/auth/session").status_code == 401


def test_logout_without_session_is_ok(client):
    resp = client.post("/v1/auth/logout")

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "username": None}


def test_login_flow_error_returns_500(client, container, monkeypatch):
    def explode(username):
        raise RuntimeError("boom")

    monkeypatch.setattr(container.throttle, "can_attempt", explode)

    resp = _login(client)

    assert resp.status_code == 500
    assert resp.json()["error"] == "login_flow_error"


def test_unusable_stored_block_does_not_lock_user_out(client, container, admin_headers):
    container.store.set("st_auth_attempts_v1", '{"alice": {"attempts": [NaN], "blockedUntil": 1e30}}')

    assert _login(client, password="nope").status_code == 401
    assert _login(client).status_code == 200
    assert client.get("/v1/admin/attempts", headers=admin_headers).status_code == 200
