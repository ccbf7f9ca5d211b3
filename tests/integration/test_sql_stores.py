"""
Integration tests for the PostgreSQL stores and the matching run.

Tests: preference upsert, application lookups, nickname compare-and-set
(expected value, paid holder, partial unique index), status updates,
concurrent allocation and match replacement.

Prerequisites:
  docker compose -f docker-compose.test.yml up -d
"""

import asyncio
import os
import random
import socket
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select

from app.core.errors import NotFoundError
from app.matching_engine.engine import MatchingEngine
from app.matching_engine.nickname_allocator import NicknameAllocator
from app.matching_engine.records import PreferenceRecord
from app.models.application import Application, ApplicationStatus, Gender
from app.models.match import Match
from app.stores.sql import SqlApplicationStore, SqlPreferenceStore


# ── Skip if PostgreSQL not available ───────────────────────────────────────

def _port_open(host: str, port: int, timeout: float = 1.0) -> bool:
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


_PG_UP = _port_open(os.environ.get("PGHOST", "localhost"), int(os.environ.get("PGPORT", "5433")))

pytestmark = pytest.mark.skipif(
    not _PG_UP,
    reason=(
        "SQL store tests require PostgreSQL. "
        "Start with: docker compose -f docker-compose.test.yml up -d"
    ),
)


# ── Helpers ────────────────────────────────────────────────────────────────

async def _add_applications(session_factory, event_id, *specs) -> dict[str, str]:
    """specs: (uid, gender, status, nickname); returns uid → key."""
    keys = {}
    async with session_factory() as session:
        async with session.begin():
            for uid, gender, status, nickname in specs:
                application = Application(
                    uid=uid, event_id=event_id, gender=gender,
                    status=status, nickname=nickname,
                )
                session.add(application)
                keys[uid] = application.id
    return keys


# ── Preferences ───────────────────────────────────────────────────────────


class TestSqlPreferenceStore:

    @pytest.mark.asyncio
    async def test_put_overwrites(self, session_factory, seeded_event, count_rows):
        store = SqlPreferenceStore(session_factory)
        await store.put(PreferenceRecord(seeded_event, "uid_a", first="uid_b"))
        await store.put(PreferenceRecord(seeded_event, "uid_a", first="uid_d", message="hi"))

        record = await store.get(seeded_event, "uid_a")
        assert record.first == "uid_d"
        assert record.message == "hi"
        assert await count_rows("preferences") == 1

    @pytest.mark.asyncio
    async def test_list_by_event(self, session_factory, seeded_event):
        store = SqlPreferenceStore(session_factory)
        await store.put(PreferenceRecord(seeded_event, "uid_a", first="uid_b"))
        await store.put(PreferenceRecord(seeded_event, "uid_b", first="uid_a"))

        voters = {r.voter_id for r in await store.list_by_event(seeded_event)}
        assert voters == {"uid_a", "uid_b"}
        assert await store.get(seeded_event, "uid_x") is None


# ── Applications ──────────────────────────────────────────────────────────


class TestSqlApplicationStore:

    @pytest.mark.asyncio
    async def test_lookups(self, session_factory, seeded_event):
        keys = await _add_applications(
            session_factory, seeded_event,
            ("uid_a", Gender.MALE, ApplicationStatus.PAID, None),
        )
        store = SqlApplicationStore(session_factory)

        by_uid = await store.get(seeded_event, "uid_a")
        by_key = await store.get_by_key(keys["uid_a"])
        assert by_uid == by_key
        assert by_uid.gender == Gender.MALE
        assert by_uid.is_paid

    @pytest.mark.asyncio
    async def test_compare_and_set(self, session_factory, seeded_event):
        keys = await _add_applications(
            session_factory, seeded_event,
            ("f0", Gender.FEMALE, ApplicationStatus.PAID, "Rose"),
            ("f1", Gender.FEMALE, ApplicationStatus.PAID, None),
            ("f2", Gender.FEMALE, ApplicationStatus.REJECTED, "Lily"),
        )
        store = SqlApplicationStore(session_factory)

        # Held by a paid record
        assert await store.compare_and_set_nickname(keys["f1"], None, "Rose") is False
        # Expected value does not match
        assert await store.compare_and_set_nickname(keys["f1"], "Iris", "Daisy") is False
        # Held only by a rejected record
        assert await store.compare_and_set_nickname(keys["f1"], None, "Lily") is True
        assert (await store.get_by_key(keys["f1"])).nickname == "Lily"
        # Target no longer paid
        assert await store.compare_and_set_nickname(keys["f2"], "Lily", "Iris") is False

        with pytest.raises(NotFoundError):
            await store.compare_and_set_nickname("missing", None, "Iris")

    @pytest.mark.asyncio
    async def test_update_status(self, session_factory, seeded_event):
        keys = await _add_applications(
            session_factory, seeded_event,
            ("uid_a", Gender.MALE, ApplicationStatus.APPROVED, None),
        )
        store = SqlApplicationStore(session_factory)

        record = await store.update_status(keys["uid_a"], ApplicationStatus.PAID)
        assert record.status == ApplicationStatus.PAID

        with pytest.raises(ValueError):
            await store.update_status(keys["uid_a"], ApplicationStatus.APPROVED)
        with pytest.raises(NotFoundError):
            await store.update_status("missing", ApplicationStatus.PAID)

    @pytest.mark.asyncio
    async def test_concurrent_allocation_is_unique(self, session_factory, seeded_event):
        keys = await _add_applications(
            session_factory, seeded_event,
            *[(f"f{i}", Gender.FEMALE, ApplicationStatus.PAID, None) for i in range(8)],
        )
        allocator = NicknameAllocator(
            application_store=SqlApplicationStore(session_factory),
            max_attempts=20,
            backoff_seconds=0.01,
            rng=random.Random(11),
        )

        names = await asyncio.gather(*(
            allocator.assign_nickname(key, seeded_event, Gender.FEMALE)
            for key in keys.values()
        ))
        assert len(set(names)) == 8


# ── Matching run ──────────────────────────────────────────────────────────


class TestMatchingRunPersistence:

    @pytest.mark.asyncio
    async def test_rerun_replaces_matches(self, session_factory, seeded_event):
        prefs = SqlPreferenceStore(session_factory)
        await prefs.put(PreferenceRecord(seeded_event, "A", first="B"))
        await prefs.put(PreferenceRecord(seeded_event, "B", first="A"))

        cache = AsyncMock()
        cache.acquire_lock = AsyncMock(return_value=MagicMock())
        engine = MatchingEngine(
            preference_store=prefs, session_factory=session_factory, cache=cache,
        )

        await engine.run_for_event(seeded_event)
        second = await engine.run_for_event(seeded_event)

        async with session_factory() as session:
            rows = (await session.execute(select(Match))).scalars().all()
        assert len(rows) == 1
        assert rows[0].run_id == second["run_id"]
        assert rows[0].score == 10
