"""Login/logout orchestration on top of the login throttle.

A blocked username never reaches credential verification. Failures are
recorded with the throttle, successes reset it and open a session. Any
unexpected exception is turned into a failed result plus an audit entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from taskguard.adapters.audit.base import AbstractAuditSink, AuditLevel, NullAuditSink
from taskguard.adapters.auth.credentials import AbstractCredentialVerifier
from taskguard.adapters.auth.sessions import SessionManager
from taskguard.services.attempt_store import normalize_username
from taskguard.services.login_throttle import BlockReason, LoginThrottle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    ok: bool
    username: str
    blocked: bool = False
    unlock_at: datetime | None = None
    blocked_until: datetime | None = None
    block_reason: BlockReason | None = None
    attempts_15m: int | None = None
    attempts_1h: int | None = None
    session_token: str | None = None
    error: str | None = None


class AuthService:
    """Demo authentication flow guarded by ``LoginThrottle``."""

    def __init__(
        self,
        *,
        throttle: LoginThrottle,
        verifier: AbstractCredentialVerifier,
        sessions: SessionManager,
        audit: AbstractAuditSink | None = None,
    ) -> None:
        self._throttle = throttle
        self._verifier = verifier
        self._sessions = sessions
        self._audit = audit or NullAuditSink()

    def login(self, username: str | None, password: str | None) -> LoginResult:
        """Attempt a login.

        Args:
            username: Raw username; trimmed and lower-cased.
            password: Password checked by the credential verifier.

        Returns:
            LoginResult describing success, block or failure counters.
        """
        user = normalize_username(username)
        try:
            decision = self._throttle.can_attempt(user)
            if not decision.allowed:
                self._audit.append(
                    AuditLevel.WARNING,
                    "login_blocked_attempt",
                    {
                        "username": user,
                        "reason": decision.reason,
                        "unlock_at": decision.unlock_at.isoformat() if decision.unlock_at else None,
                    },
                )
                return LoginResult(
                    ok=False,
                    username=user,
                    blocked=True,
                    unlock_at=decision.unlock_at,
                    error=decision.reason,
                )

            if self._verifier.verify(user, str(password or "")):
                self._throttle.reset_attempts(user)
                token = self._sessions.establish(user)
                self._audit.append(AuditLevel.INFO, "user_login_success", {"username": user})
                logger.info("auth.login_success", extra={"username": user})
                return LoginResult(ok=True, username=user, session_token=token)

            outcome = self._throttle.record_failed_login(user)
            self._audit.append(
                AuditLevel.WARNING,
                "user_login_failed",
                {
                    "username": user,
                    "attempts_15min": outcome.attempts_15m,
                    "blocked": outcome.blocked,
                    "blocked_until": outcome.blocked_until.isoformat() if outcome.blocked_until else None,
                },
            )
            logger.info(
                "auth.login_failed",
                extra={
                    "username": user,
                    "attempts_15m": outcome.attempts_15m,
                    "attempts_1h": outcome.attempts_1h,
                    "blocked": outcome.blocked,
                },
            )
            return LoginResult(
                ok=False,
                username=user,
                blocked=outcome.blocked,
                blocked_until=outcome.blocked_until,
                block_reason=outcome.block_reason,
                attempts_15m=outcome.attempts_15m,
                attempts_1h=outcome.attempts_1h,
                error="invalid_credentials",
            )
        except Exception as exc:
            logger.exception("auth.login_flow_error", extra={"username": user})
            self._audit.append(AuditLevel.ERROR, "login_flow_error", {"error": str(exc)})
            return LoginResult(ok=False, username=user, error="login_flow_error")

    def logout(self, token: str | None) -> str | None:
        """Clear the session behind ``token`` and return its username."""

        username = self._sessions.clear(token)
        self._audit.append(AuditLevel.INFO, "user_logged_out", {"username": username})
        return username

    def current_user(self, token: str | None) -> str | None:
        return self._sessions.resolve(token)
