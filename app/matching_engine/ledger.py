"""
Preference ledger — validates and records post-event rankings.

Submit flow:
  1. Check the caller-supplied "event has ended" flag
  2. Voter must hold a payment-confirmed application for the event
  3. Each filled slot: not the voter, not repeated, an approved/paid
     application of the same event in the opposite category
  4. Persist (overwrites an earlier ranking of the same voter)
  5. Recompute the event's vote tally and publish it

Nothing is written unless every check passes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.core.errors import NotFoundError, ValidationError
from app.matching_engine.records import (
    ApplicationRecord,
    PreferenceRecord,
    VoteTally,
    normalize_choice,
)
from app.matching_engine.tally import compute_vote_tally
from app.models.application import RANKABLE_STATUSES

if TYPE_CHECKING:
    from app.matching_engine.event_cache import EventCache
    from app.stores.base import ApplicationStore, PreferenceStore

logger = logging.getLogger(__name__)

SLOT_NAMES = ("first", "second", "third")


class PreferenceLedger:
    """Records rankings and keeps the published tally in step."""

    def __init__(
        self,
        preference_store: "PreferenceStore | None" = None,
        application_store: "ApplicationStore | None" = None,
        cache: "EventCache | None" = None,
    ):
        self._preference_store = preference_store
        self._application_store = application_store
        self._cache = cache

    @property
    def preference_store(self) -> "PreferenceStore":
        if self._preference_store is not None:
            return self._preference_store
        from app.stores.sql import preference_store
        return preference_store

    @property
    def application_store(self) -> "ApplicationStore":
        if self._application_store is not None:
            return self._application_store
        from app.stores.sql import application_store
        return application_store

    @property
    def cache(self) -> "EventCache":
        if self._cache is not None:
            return self._cache
        from app.matching_engine.event_cache import event_cache
        return event_cache

    # ── Public entry points ──────────────────────────────────────────────

    async def submit_preference(
        self,
        event_id: str,
        voter_id: str,
        choices: dict[str, str | None],
        message: str | None = None,
        *,
        event_ended: bool,
    ) -> PreferenceRecord:
        """
        Validate and store *voter_id*'s ranking for *event_id*.

        *choices* maps ``first``/``second``/``third`` to a participant
        uid or None.  Raises ValidationError / NotFoundError before any
        write.

        The ranking is committed before the tally is refreshed: if the
        refresh fails the error propagates but the ranking stays stored,
        and a resubmission simply overwrites it.
        """
        if not event_ended:
            raise ValidationError("Rankings open after the event has ended")

        voter = await self.application_store.get(event_id, voter_id)
        if voter is None:
            raise NotFoundError(f"No application for {voter_id} in event {event_id}")
        if not voter.is_paid:
            raise ValidationError("Only payment-confirmed participants can rank")

        slots = {name: normalize_choice(choices.get(name)) for name in SLOT_NAMES}
        await self._validate_slots(event_id, voter, slots)

        record = PreferenceRecord(
            event_id=event_id,
            voter_id=voter_id,
            message=message,
            **slots,
        )
        await self.preference_store.put(record)
        logger.info(
            "Ranking stored for %s in event %s (%d slots)",
            voter_id, event_id, len(record.ranked()),
        )

        try:
            await self.refresh_tally(event_id)
        except Exception:
            logger.exception(
                "Ranking for %s in event %s stored but tally refresh failed",
                voter_id, event_id,
            )
            raise
        return record

    async def refresh_tally(self, event_id: str) -> VoteTally:
        """Recompute the tally from every stored ranking and publish it."""
        preferences = await self.preference_store.list_by_event(event_id)
        tally = compute_vote_tally(preferences, event_id=event_id)
        await self.cache.publish_tally(tally)
        return tally

    async def get_tally(self, event_id: str) -> VoteTally:
        """Cached tally, recomputed on a cache miss."""
        tally = await self.cache.fetch_tally(event_id)
        if tally is None:
            tally = await self.refresh_tally(event_id)
        return tally

    # ── Validation ───────────────────────────────────────────────────────

    async def _validate_slots(
        self,
        event_id: str,
        voter: ApplicationRecord,
        slots: dict[str, str | None],
    ) -> None:
        seen: set[str] = set()
        for name in SLOT_NAMES:
            candidate_id = slots[name]
            if candidate_id is None:
                continue
            if candidate_id == voter.uid:
                raise ValidationError(f"{name}: participants cannot rank themselves")
            if candidate_id in seen:
                raise ValidationError(f"{name}: {candidate_id} is already ranked")
            seen.add(candidate_id)

        if not seen:
            return

        applications = {
            record.uid: record
            for record in await self.application_store.list_by_event(event_id)
        }
        for name in SLOT_NAMES:
            candidate_id = slots[name]
            if candidate_id is None:
                continue
            candidate = applications.get(candidate_id)
            if candidate is None or candidate.status not in RANKABLE_STATUSES:
                raise ValidationError(f"{name}: {candidate_id} is not a participant of this event")
            if candidate.gender == voter.gender:
                raise ValidationError(f"{name}: {candidate_id} is in the same category")


# Module-level singleton (uses the SQL stores and default redis client)
preference_ledger = PreferenceLedger()
