"""Pydantic schemas for login/logout endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from taskguard.services.auth_service import LoginResult


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=254, description="Username (case-insensitive).")
    password: str = Field(..., max_length=1024, description="Password checked by the credential verifier.")


class LoginResponse(BaseModel):
    """Outcome of a login attempt."""

    ok: bool = Field(..., description="True when credentials were accepted.")
    username: str = Field(..., description="Normalized username the attempt was recorded for.")
    blocked: bool = Field(False, description="True when the user is (now) temporarily blocked.")
    unlock_at: datetime | None = Field(
        None, description="Block expiry when the attempt was refused without checking credentials."
    )
    blocked_until: datetime | None = Field(
        None, description="Block expiry stored after recording this failure, if any."
    )
    block_reason: str | None = Field(None, description="TIER_15MIN or TIER_1HOUR when this failure caused a block.")
    attempts_15m: int | None = Field(None, description="Failures in the trailing short window.")
    attempts_1h: int | None = Field(None, description="Failures in the trailing long window.")
    session_token: str | None = Field(None, description="Session token to send on later requests.")
    error: str | None = Field(
        None,
        description="invalid_credentials, temporarily_blocked, storage_unavailable or login_flow_error.",
    )

    @classmethod
    def from_result(cls, result: LoginResult) -> "LoginResponse":
        return cls(
            ok=result.ok,
            username=result.username,
            blocked=result.blocked,
            unlock_at=result.unlock_at,
            blocked_until=result.blocked_until,
            block_reason=result.block_reason.value if result.block_reason else None,
            attempts_15m=result.attempts_15m,
            attempts_1h=result.attempts_1h,
            session_token=result.session_token,
            error=result.error,
        )


class SessionResponse(BaseModel):
    username: str | None = Field(None, description="Logged-in user, if the session is valid.")
