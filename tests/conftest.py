"""
Pytest fixtures for the Gold Rewards test suite.

- Unit tests run the rewards services over the in-memory document store.
- Route tests drive the FastAPI app through TestClient over the same store.
- A frozen clock makes vesting boundaries exact.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from apps.backend.config.settings import Settings
from apps.backend.main import create_app
from apps.backend.services.rewards.container import build_services
from apps.backend.store.memory_store import InMemoryDocumentStore

ADMIN_TOKEN = "test-admin-token"
T0 = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def services(store, clock):
    return build_services(store, clock=clock)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        STORE_BACKEND="memory",
        ADMIN_TOKEN=ADMIN_TOKEN,
        DEFAULT_GOLD_PRICE=60.0,
        REQUEST_LOGGING=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def client(test_settings, store, clock):
    app = create_app(settings=test_settings, store=store, clock=clock)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers():
    return {"X-Internal-Token": ADMIN_TOKEN}
