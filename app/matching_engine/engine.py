"""
Main matching engine orchestrator.

Coordinates one matching run for an event: acquires the event's
distributed lock, loads every stored ranking, resolves them into
score-tiered pairs, replaces the event's persisted matches in a single
DB transaction, and builds the run report.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import delete

from app.matching_engine.matcher import resolve_matches, unmatched_voters
from app.matching_engine.records import MatchPair, PreferenceRecord
from app.matching_engine.reporter import build_run_report
from app.models.match import Match

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.database import SessionFactory
    from app.matching_engine.event_cache import EventCache
    from app.stores.base import PreferenceStore

logger = logging.getLogger(__name__)


def run_order(preferences: list[PreferenceRecord]) -> list[PreferenceRecord]:
    """Deterministic resolution order: oldest submission first, then voter id."""
    return sorted(preferences, key=lambda p: (p.created_at, p.voter_id))


class MatchingEngine:
    """Orchestrates matching runs, one event at a time."""

    def __init__(
        self,
        preference_store: "PreferenceStore | None" = None,
        session_factory: "SessionFactory | None" = None,
        cache: "EventCache | None" = None,
    ):
        """
        Args:
            preference_store: Source of rankings
                              (defaults to ``app.stores.sql.preference_store``).
            session_factory: Async session factory for persisting matches
                             (defaults to ``app.database.async_session``).
            cache: EventCache holding the run lock
                   (defaults to the module-level singleton).
        """
        self._preference_store = preference_store
        self._session_factory = session_factory
        self._cache = cache

    @property
    def preference_store(self) -> "PreferenceStore":
        if self._preference_store is not None:
            return self._preference_store
        from app.stores.sql import preference_store
        return preference_store

    @property
    def session_factory(self) -> "SessionFactory":
        if self._session_factory is not None:
            return self._session_factory
        from app.database import async_session
        return async_session

    @property
    def cache(self) -> "EventCache":
        if self._cache is not None:
            return self._cache
        from app.matching_engine.event_cache import event_cache
        return event_cache

    # ── Public entry points ──────────────────────────────────────────────

    async def run_for_event(self, event_id: str) -> dict:
        """
        Execute a full matching run for *event_id*.

        Acquires a distributed lock to prevent concurrent runs of the same
        event.  Returns ``{"skipped": True}`` if the lock is already held.
        """
        lock = await self.cache.acquire_lock(event_id)
        if lock is None:
            logger.warning(
                "Matching run for event %s skipped, lock held by another process",
                event_id,
            )
            return {"skipped": True, "event_id": event_id}

        try:
            return await self._execute_run(event_id)
        finally:
            await self.cache.release_lock(lock)

    async def preview(self, event_id: str) -> dict:
        """Resolve the current rankings without persisting anything."""
        preferences = run_order(await self.preference_store.list_by_event(event_id))
        pairs = resolve_matches(preferences)
        return {
            "event_id": event_id,
            "participants": len({p.voter_id for p in preferences}),
            "pairs": [pair.to_dict() for pair in pairs],
            "unmatched": unmatched_voters(preferences, pairs),
        }

    # ── Core run logic ───────────────────────────────────────────────────

    async def _execute_run(self, event_id: str) -> dict:
        """Run the full matching pipeline."""
        started_at = datetime.now(timezone.utc)
        run_id = f"MR-{started_at:%Y%m%d-%H%M%S}"

        # 1. Load rankings in a deterministic order
        preferences = run_order(await self.preference_store.list_by_event(event_id))
        participants = len({p.voter_id for p in preferences})

        # 2. Resolve
        pairs = resolve_matches(preferences)
        unmatched = unmatched_voters(preferences, pairs)

        # 3. Replace persisted matches
        async with self.session_factory() as session:
            async with session.begin():
                await self._replace_matches(session, run_id, event_id, pairs)

        completed_at = datetime.now(timezone.utc)
        logger.info(
            "Matching run %s for event %s: %d pairs from %d participants",
            run_id, event_id, len(pairs), participants,
        )

        # 4. Build report
        return build_run_report(
            run_id=run_id,
            event_id=event_id,
            started_at=started_at,
            completed_at=completed_at,
            pairs=pairs,
            unmatched=unmatched,
            participants=participants,
        )

    # ── Match persistence ────────────────────────────────────────────────

    @staticmethod
    async def _replace_matches(
        session: "AsyncSession",
        run_id: str,
        event_id: str,
        pairs: list[MatchPair],
    ) -> None:
        """Drop the event's previous matches and add one row per pair."""
        await session.execute(delete(Match).where(Match.event_id == event_id))
        for pair in pairs:
            session.add(Match(
                run_id=run_id,
                event_id=event_id,
                user_a=pair.user_a,
                user_b=pair.user_b,
                tier=pair.tier,
                score=pair.score,
            ))
        await session.flush()


# Module-level singleton (uses default stores, session_factory and cache)
matching_engine = MatchingEngine()
