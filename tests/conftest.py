"""
Shared test fixtures for the rotation dating core.

Provides in-memory stores, a Redis mock, record factories and an async
test client with the core components overridden.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.api.deps import (
    get_application_store,
    get_event,
    get_matching_engine,
    get_nickname_allocator,
    get_preference_ledger,
)
from app.matching_engine.event_cache import EventCache
from app.matching_engine.ledger import PreferenceLedger
from app.matching_engine.nickname_allocator import NicknameAllocator
from app.matching_engine.records import ApplicationRecord, PreferenceRecord
from app.models.application import ApplicationStatus, Gender
from app.stores.memory import InMemoryApplicationStore, InMemoryPreferenceStore

EVENT_ID = "evt-1"
BASE_TIME = datetime(2026, 5, 1, 21, 0, tzinfo=timezone.utc)


# --- Record factories ---


def _make_application(
    uid: str,
    gender: Gender = Gender.MALE,
    status: ApplicationStatus = ApplicationStatus.PAID,
    event_id: str = EVENT_ID,
    nickname: str | None = None,
    key: str | None = None,
) -> ApplicationRecord:
    return ApplicationRecord(
        key=key or f"app-{uid}",
        uid=uid,
        event_id=event_id,
        gender=gender,
        status=status,
        nickname=nickname,
    )


def _make_preference(
    voter_id: str,
    first: str | None = None,
    second: str | None = None,
    third: str | None = None,
    event_id: str = EVENT_ID,
    offset: int = 0,
) -> PreferenceRecord:
    return PreferenceRecord(
        event_id=event_id,
        voter_id=voter_id,
        first=first,
        second=second,
        third=third,
        created_at=BASE_TIME + timedelta(seconds=offset),
    )


@pytest.fixture
def make_application():
    """Factory fixture for ApplicationRecord instances."""
    return _make_application


@pytest.fixture
def make_preference():
    """Factory fixture for PreferenceRecord instances."""
    return _make_preference


# --- Mock Redis ---


@pytest.fixture
def mock_redis():
    """AsyncMock Redis client backed by a plain dict for get/set."""
    data: dict[str, str] = {}

    async def _set(key, value):
        data[key] = value

    async def _setex(key, ttl, value):
        data[key] = value

    async def _get(key):
        return data.get(key)

    redis = AsyncMock()
    redis.set = AsyncMock(side_effect=_set)
    redis.setex = AsyncMock(side_effect=_setex)
    redis.get = AsyncMock(side_effect=_get)
    redis.delete = AsyncMock()

    lock = AsyncMock()
    lock.acquire = AsyncMock(return_value=True)
    lock.release = AsyncMock()
    redis.lock = MagicMock(return_value=lock)

    redis.store = data
    return redis


@pytest.fixture
def event_cache(mock_redis):
    return EventCache(redis_client=mock_redis)


# --- In-memory stores ---


@pytest.fixture
def preference_store():
    return InMemoryPreferenceStore()


@pytest.fixture
def application_store():
    """Four paid participants (two per category) plus an approved and a pending one."""
    return InMemoryApplicationStore([
        _make_application("uid_a", Gender.MALE),
        _make_application("uid_c", Gender.MALE),
        _make_application("uid_b", Gender.FEMALE),
        _make_application("uid_d", Gender.FEMALE),
        _make_application("uid_e", Gender.FEMALE, ApplicationStatus.APPROVED),
        _make_application("uid_p", Gender.FEMALE, ApplicationStatus.PENDING),
    ])


@pytest.fixture
def ledger(preference_store, application_store, event_cache):
    return PreferenceLedger(
        preference_store=preference_store,
        application_store=application_store,
        cache=event_cache,
    )


@pytest.fixture
def allocator(application_store):
    """Allocator with a seeded RNG and no real sleeping."""
    import random

    return NicknameAllocator(
        application_store=application_store,
        rng=random.Random(7),
        sleep=AsyncMock(),
    )


# --- Dependency Override Helpers ---


@pytest.fixture
def ended_event():
    """An event dated in the past with no explicit end time."""
    return SimpleNamespace(
        id=EVENT_ID,
        event_date=datetime(2020, 1, 1).date(),
        end_time=None,
        schedule_end=None,
    )


@pytest.fixture
def mock_engine():
    engine = AsyncMock()
    engine.run_for_event = AsyncMock()
    engine.preview = AsyncMock()
    return engine


@pytest_asyncio.fixture
async def client(ledger, application_store, allocator, mock_engine, ended_event):
    """
    Async HTTP test client with the event lookup and the core
    components overridden to use in-memory doubles.
    """
    from app.main import app

    async def override_get_event(event_id: str):
        return ended_event

    app.dependency_overrides[get_event] = override_get_event
    app.dependency_overrides[get_preference_ledger] = lambda: ledger
    app.dependency_overrides[get_application_store] = lambda: application_store
    app.dependency_overrides[get_nickname_allocator] = lambda: allocator
    app.dependency_overrides[get_matching_engine] = lambda: mock_engine

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
