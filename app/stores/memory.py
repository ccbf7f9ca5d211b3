"""
In-memory stores for single-node deployments and tests.

The nickname compare-and-set is made atomic with an ``asyncio.Lock``;
every other call is a plain dict access.  Records are frozen, so a
caller holding one sees a snapshot, exactly as with a remote store.
"""

from __future__ import annotations

import asyncio

from app.core.errors import NotFoundError
from app.matching_engine.records import ApplicationRecord, PreferenceRecord
from app.models.application import Application, ApplicationStatus


class InMemoryPreferenceStore:
    """Preferences keyed by ``(event_id, voter_id)``; put overwrites."""

    def __init__(self):
        self._records: dict[tuple[str, str], PreferenceRecord] = {}

    async def put(self, record: PreferenceRecord) -> None:
        self._records[(record.event_id, record.voter_id)] = record

    async def get(self, event_id: str, voter_id: str) -> PreferenceRecord | None:
        return self._records.get((event_id, voter_id))

    async def list_by_event(self, event_id: str) -> list[PreferenceRecord]:
        return [r for (eid, _), r in self._records.items() if eid == event_id]


class InMemoryApplicationStore:
    """Applications keyed by application key."""

    def __init__(self, records: list[ApplicationRecord] | None = None):
        self._records: dict[str, ApplicationRecord] = {}
        self._lock = asyncio.Lock()
        self.nickname_writes = 0
        for record in records or []:
            self.add(record)

    def add(self, record: ApplicationRecord) -> None:
        self._records[record.key] = record

    async def get(self, event_id: str, uid: str) -> ApplicationRecord | None:
        for record in self._records.values():
            if record.event_id == event_id and record.uid == uid:
                return record
        return None

    async def get_by_key(self, key: str) -> ApplicationRecord | None:
        return self._records.get(key)

    async def list_by_event(self, event_id: str) -> list[ApplicationRecord]:
        return [r for r in self._records.values() if r.event_id == event_id]

    async def compare_and_set_nickname(
        self, key: str, expected: str | None, new: str,
    ) -> bool:
        async with self._lock:
            current = self._records.get(key)
            if current is None:
                raise NotFoundError(f"Application {key} not found")
            if current.nickname != expected or not current.is_paid:
                return False
            for other in self._records.values():
                if (
                    other.key != key
                    and other.event_id == current.event_id
                    and other.is_paid
                    and other.nickname == new
                ):
                    return False
            self._records[key] = current.with_nickname(new)
            self.nickname_writes += 1
            return True

    async def update_status(
        self, key: str, status: ApplicationStatus,
    ) -> ApplicationRecord:
        async with self._lock:
            current = self._records.get(key)
            if current is None:
                raise NotFoundError(f"Application {key} not found")
            if not Application.is_valid_transition(current.status, status):
                raise ValueError(
                    f"Invalid transition: {current.status.value} -> {status.value}"
                )
            updated = current.with_status(status)
            self._records[key] = updated
            return updated
