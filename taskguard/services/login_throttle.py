"""Two-tier sliding-window throttle for failed logins.

Each failed login appends the current instant to the user's record, drops
instants older than the longest window and counts what remains in two
trailing windows:

- short tier: ``max_attempts_15m`` failures within ``window_15m_seconds``
  blocks the user for ``block_15m_seconds``;
- long tier: ``max_attempts_1h`` failures within ``window_1h_seconds``
  blocks the user for ``block_1h_seconds``.

The short tier is evaluated first and wins when both cross together. A
failure recorded while a block is active is counted but leaves the existing
expiry untouched unless it crosses a threshold again.

Notes:
- The lock makes load/mutate/save atomic within one process only. Processes
  sharing a file store can still lose updates.
- Storage faults degrade to "allowed" unless ``fail_closed`` is configured.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from taskguard.adapters.audit.base import AbstractAuditSink, AuditLevel, NullAuditSink
from taskguard.core.config import ThrottleSettings
from taskguard.core.errors import StorageAppError
from taskguard.services.attempt_store import AttemptRecord, AttemptStore, normalize_username

logger = logging.getLogger(__name__)


class BlockReason(str, Enum):
    TIER_15MIN = "TIER_15MIN"
    TIER_1HOUR = "TIER_1HOUR"


@dataclass(frozen=True)
class ThrottleDecision:
    """Whether a login attempt may proceed.

    Attributes:
        allowed: False while the user is blocked.
        unlock_at: Block expiry when not allowed.
        reason: ``temporarily_blocked`` or ``storage_unavailable`` when denied.
    """

    allowed: bool
    unlock_at: datetime | None = None
    reason: str | None = None


@dataclass(frozen=True)
class FailedLoginOutcome:
    """Counters and block state after recording a failed login."""

    attempts_15m: int
    attempts_1h: int
    blocked: bool
    block_reason: BlockReason | None = None
    blocked_until: datetime | None = None


def ms_to_datetime(instant_ms: int) -> datetime:
    return datetime.fromtimestamp(instant_ms / 1000, tz=timezone.utc)


class LoginThrottle:
    """Decide whether a username may attempt to log in and record outcomes."""

    def __init__(
        self,
        store: AttemptStore,
        *,
        audit: AbstractAuditSink | None = None,
        config: ThrottleSettings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the throttle.

        Args:
            store: Attempt record storage.
            audit: Sink notified of recorded failures and resets.
            config: Thresholds and windows; defaults read from environment.
            clock: Time source returning UNIX time in seconds.
        """
        self._store = store
        self._audit = audit or NullAuditSink()
        self._config = config or ThrottleSettings()
        self._clock = clock
        self._lock = threading.RLock()

    @property
    def config(self) -> ThrottleSettings:
        return self._config

    def _now_ms(self) -> int:
        return int(round(self._clock() * 1000))

    def can_attempt(self, username: str | None) -> ThrottleDecision:
        """Check the stored block without mutating anything."""

        key = normalize_username(username)
        try:
            record = self._store.load(key, strict=self._config.fail_closed)
        except StorageAppError:
            logger.error(
                "throttle.storage_unavailable",
                extra={"username": key, "fail_closed": True},
            )
            return ThrottleDecision(allowed=False, reason="storage_unavailable")

        now = self._now_ms()
        if record.blocked_until is not None and record.blocked_until > now:
            return ThrottleDecision(
                allowed=False,
                unlock_at=ms_to_datetime(record.blocked_until),
                reason="temporarily_blocked",
            )
        return ThrottleDecision(allowed=True)

    def record_failed_login(self, username: str | None) -> FailedLoginOutcome:
        """Append a failure, re-evaluate both tiers and persist the record."""

        cfg = self._config
        key = normalize_username(username)

        with self._lock:
            record = self._store.load(key)
            now = self._now_ms()
            record.attempts.append(now)

            prune_cutoff = now - cfg.prune_window_seconds * 1000
            record.attempts = [ts for ts in record.attempts if ts >= prune_cutoff]

            since_15m = now - cfg.window_15m_seconds * 1000
            since_1h = now - cfg.window_1h_seconds * 1000
            c15 = sum(1 for ts in record.attempts if ts >= since_15m)
            c1h = sum(1 for ts in record.attempts if ts >= since_1h)

            reason = self._evaluate(record, now=now, c15=c15, c1h=c1h)
            self._store.save(key, record)

        if reason is not None:
            logger.warning(
                "throttle.blocked",
                extra={
                    "username": key,
                    "block_reason": reason.value,
                    "attempts_15m": c15,
                    "attempts_1h": c1h,
                    "blocked_until_ms": record.blocked_until,
                },
            )

        self._audit.append(
            AuditLevel.WARNING,
            "failed_login_recorded",
            {
                "username": key,
                "now": ms_to_datetime(now).isoformat(),
                "attempts_last_15min": c15,
                "attempts_last_1h": c1h,
                "blocked_reason": reason.value if reason else None,
            },
        )

        return FailedLoginOutcome(
            attempts_15m=c15,
            attempts_1h=c1h,
            blocked=reason is not None,
            block_reason=reason,
            blocked_until=(
                ms_to_datetime(record.blocked_until)
                if record.blocked_until is not None
                else None
            ),
        )

    def _evaluate(self, record: AttemptRecord, *, now: int, c15: int, c1h: int) -> BlockReason | None:
        cfg = self._config
        if c15 >= cfg.max_attempts_15m:
            record.blocked_until = now + cfg.block_15m_seconds * 1000
            return BlockReason.TIER_15MIN
        if c1h >= cfg.max_attempts_1h:
            record.blocked_until = now + cfg.block_1h_seconds * 1000
            return BlockReason.TIER_1HOUR
        # Lazy expiry; an active block is left as is.
        if record.blocked_until is not None and record.blocked_until <= now:
            record.blocked_until = None
        return None

    def reset_attempts(self, username: str | None) -> None:
        """Forget all failures for ``username``. Idempotent."""

        key = normalize_username(username)
        with self._lock:
            existed = self._store.delete(key)
        self._audit.append(
            AuditLevel.INFO,
            "reset_attempts",
            {"username": key, "had_record": existed},
        )

    def get_all(self) -> dict[str, AttemptRecord]:
        return self._store.load_all_raw()
