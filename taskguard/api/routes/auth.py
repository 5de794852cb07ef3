from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from taskguard.core.auth import get_session_token, require_session_user
from taskguard.core.dependencies import get_auth_service
from taskguard.schemas.auth import LoginRequest, LoginResponse, SessionResponse
from taskguard.services.auth_service import AuthService

router = APIRouter(tags=["Auth"])

AuthDep = Annotated[AuthService, Depends(get_auth_service)]


def _retry_after_seconds(unlock_at: datetime) -> int:
    remaining = (unlock_at - datetime.now(timezone.utc)).total_seconds()
    return max(0, int(math.ceil(remaining)))


@router.post(
    "/auth/login",
    response_model=LoginResponse,
    responses={
        401: {"model": LoginResponse, "description": "Invalid credentials; failure recorded."},
        429: {"model": LoginResponse, "description": "User temporarily blocked; credentials not checked."},
        500: {"model": LoginResponse, "description": "Unexpected error in the login flow."},
    },
)
def login(body: LoginRequest, response: Response, auth: AuthDep) -> LoginResponse:
    """Log in with username and password.

    Blocked users are refused with 429 and a ``Retry-After`` header before
    their credentials are looked at. Wrong credentials return 401 together
    with the failure counters and any block they triggered.
    """
    result = auth.login(body.username, body.password)
    payload = LoginResponse.from_result(result)

    if result.ok:
        return payload

    if result.error == "login_flow_error":
        response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    elif result.unlock_at is not None or result.error == "storage_unavailable":
        response.status_code = status.HTTP_429_TOO_MANY_REQUESTS
        if result.unlock_at is not None:
            response.headers["Retry-After"] = str(_retry_after_seconds(result.unlock_at))
    else:
        response.status_code = status.HTTP_401_UNAUTHORIZED
    return payload


@router.post("/auth/logout")
def logout(
    token: Annotated[str | None, Depends(get_session_token)],
    auth: AuthDep,
) -> dict:
    username = auth.logout(token)
    return {"ok": True, "username": username}


@router.get("/auth/session", response_model=SessionResponse)
def current_session(username: Annotated[str, Depends(require_session_user)]) -> SessionResponse:
    return SessionResponse(username=username)
