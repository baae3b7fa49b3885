"""Pytest configuration and shared fixtures.

Every engine under test runs on a ``FakeClock`` so risk thresholds and
session splits can be crossed deterministically, and on an in-memory
store so nothing touches Redis.
"""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set testing mode BEFORE importing the app so the tick scheduler stays off
os.environ["TESTING"] = "true"
os.environ.setdefault("STORE_BACKEND", "memory")

from dosewatch.config import settings

settings.testing = True

from dosewatch.core.dosage.constants import MS_PER_MINUTE
from dosewatch.core.dosage.engine import DosageEngine
from dosewatch.main import create_app
from dosewatch.services.notifier import RecentNotificationSink
from dosewatch.services.store import MemoryStore

# 2024-01-01T12:00:00Z
T0_MS = 1_704_110_400_000


class FakeClock:
    """Injectable engine clock returning epoch milliseconds."""

    def __init__(self, start_ms: int = T0_MS):
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, minutes: float = 0, ms: int = 0) -> int:
        self.now_ms += int(minutes * MS_PER_MINUTE) + ms
        return self.now_ms

    def set(self, now_ms: int) -> None:
        self.now_ms = now_ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def notifier() -> RecentNotificationSink:
    return RecentNotificationSink(max_items=100)


@pytest.fixture
def engine(store, notifier, clock) -> DosageEngine:
    """Restored engine with default settings and a single default user."""
    dosage_engine = DosageEngine(store, notifier, clock=clock)
    dosage_engine.restore()
    return dosage_engine


@pytest.fixture
def app(engine, store, notifier):
    return create_app(engine=engine, store=store, notifier=notifier, config=settings)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
