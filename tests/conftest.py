"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any ``taskguard`` import so the global
settings object is built from test values and no .env file is loaded.
"""

import os
import time

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-admin-key,other-admin-key")
os.environ.setdefault("APP_STORAGE_BACKEND", "memory")
os.environ.setdefault("APP_DEMO_PASSWORD", "1234")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from taskguard.adapters.audit.store import StoreAuditSink
from taskguard.adapters.auth.credentials import DemoCredentialVerifier
from taskguard.adapters.storage.in_memory import InMemoryKeyValueStore
from taskguard.core.app_factory import create_app
from taskguard.core.config import ThrottleSettings, settings
from taskguard.core.container import ServiceContainer
from taskguard.services.attempt_store import AttemptStore
from taskguard.services.login_throttle import LoginThrottle


class FakeClock:
    """Deterministic UNIX-seconds clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float = 0, *, minutes: float = 0) -> None:
        self.current += seconds + minutes * 60


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def audit_sink(kv_store: InMemoryKeyValueStore) -> StoreAuditSink:
    return StoreAuditSink(kv_store)


@pytest.fixture
def attempt_store(kv_store: InMemoryKeyValueStore) -> AttemptStore:
    return AttemptStore(kv_store)


@pytest.fixture
def throttle(attempt_store: AttemptStore, audit_sink: StoreAuditSink, clock: FakeClock) -> LoginThrottle:
    return LoginThrottle(attempt_store, audit=audit_sink, config=ThrottleSettings(), clock=clock)


@pytest.fixture
def live_clock() -> FakeClock:
    """Fake clock anchored at real time, so Retry-After values stay sensible."""
    return FakeClock(start=time.time())


@pytest.fixture
def container(live_clock: FakeClock) -> ServiceContainer:
    return ServiceContainer.create(
        settings,
        store=InMemoryKeyValueStore(),
        verifier=DemoCredentialVerifier("1234"),
        clock=live_clock,
    )


@pytest.fixture
def client(container: ServiceContainer) -> TestClient:
    app = create_app(settings, container=container, configure_logs=False)
    return TestClient(app)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-API-Key": "test-admin-key"}
