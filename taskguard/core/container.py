"""Construction and teardown of long-lived application services.

One container is built per application instance and stored on
``app.state``. Routes reach services through the dependency helpers in
``taskguard.core.dependencies``; nothing keeps module-level state.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from taskguard.adapters.audit.store import StoreAuditSink
from taskguard.adapters.auth.credentials import AbstractCredentialVerifier, DemoCredentialVerifier
from taskguard.adapters.auth.sessions import SessionManager
from taskguard.adapters.storage.base import AbstractKeyValueStore
from taskguard.adapters.storage.in_memory import InMemoryKeyValueStore
from taskguard.adapters.storage.json_file import JsonFileKeyValueStore
from taskguard.core.config import Settings, settings as default_settings
from taskguard.core.errors import ValidationAppError
from taskguard.services.attempt_store import AttemptStore
from taskguard.services.auth_service import AuthService
from taskguard.services.contact_service import ContactService
from taskguard.services.login_throttle import LoginThrottle
from taskguard.services.task_service import TaskService

logger = logging.getLogger(__name__)


def build_store(cfg: Settings) -> AbstractKeyValueStore:
    """Create the key-value backend selected by ``APP_STORAGE_BACKEND``."""

    backend = cfg.app.storage_backend.lower()
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "file":
        return JsonFileKeyValueStore(cfg.app.storage_path)
    raise ValidationAppError(
        code="unsupported_storage_backend",
        message=f"Unsupported storage backend: {cfg.app.storage_backend}",
        details={"hint": "Use APP_STORAGE_BACKEND=memory or APP_STORAGE_BACKEND=file"},
    )


@dataclass
class ServiceContainer:
    """Bundle of services sharing one store and one audit sink."""

    store: AbstractKeyValueStore
    audit: StoreAuditSink
    attempts: AttemptStore
    throttle: LoginThrottle
    sessions: SessionManager
    auth: AuthService
    tasks: TaskService
    contacts: ContactService

    @classmethod
    def create(
        cls,
        cfg: Settings | None = None,
        *,
        store: AbstractKeyValueStore | None = None,
        verifier: AbstractCredentialVerifier | None = None,
        clock: Callable[[], float] = time.time,
    ) -> "ServiceContainer":
        cfg = cfg or default_settings
        store = store or build_store(cfg)
        audit = StoreAuditSink(store, max_entries=cfg.app.audit_max_entries)
        attempts = AttemptStore(store, storage_key=cfg.throttle.storage_key)
        throttle = LoginThrottle(attempts, audit=audit, config=cfg.throttle, clock=clock)
        sessions = SessionManager(store, audit=audit)
        auth = AuthService(
            throttle=throttle,
            verifier=verifier or DemoCredentialVerifier(cfg.app.demo_password),
            sessions=sessions,
            audit=audit,
        )
        logger.info(
            "container.created",
            extra={"storage_backend": type(store).__name__, "fail_closed": cfg.throttle.fail_closed},
        )
        return cls(
            store=store,
            audit=audit,
            attempts=attempts,
            throttle=throttle,
            sessions=sessions,
            auth=auth,
            tasks=TaskService(store, audit=audit),
            contacts=ContactService(store, audit=audit),
        )

    def close(self) -> None:
        self.store.close()
        logger.info("container.closed")
