"""
Store interfaces consumed by the ranking and nickname core.

Architecture:
  - PreferenceStore  (protocol) — one ranking per (event, voter)
  - ApplicationStore (protocol) — applications plus the atomic
    nickname compare-and-set
  - ``app.stores.memory`` — single-node implementations (asyncio lock)
  - ``app.stores.sql``    — PostgreSQL implementations (SQLAlchemy)
"""

from __future__ import annotations

from typing import Protocol

from app.matching_engine.records import ApplicationRecord, PreferenceRecord
from app.models.application import ApplicationStatus


class PreferenceStore(Protocol):
    async def put(self, record: PreferenceRecord) -> None: ...

    async def get(self, event_id: str, voter_id: str) -> PreferenceRecord | None: ...

    async def list_by_event(self, event_id: str) -> list[PreferenceRecord]: ...


class ApplicationStore(Protocol):
    async def get(self, event_id: str, uid: str) -> ApplicationRecord | None: ...

    async def get_by_key(self, key: str) -> ApplicationRecord | None: ...

    async def list_by_event(self, event_id: str) -> list[ApplicationRecord]: ...

    async def compare_and_set_nickname(
        self, key: str, expected: str | None, new: str,
    ) -> bool:
        """
        Atomically set the nickname of application *key* to *new*.

        Returns False (conflict) when the application is no longer
        payment-confirmed, when its current nickname is not *expected*,
        or when *new* is already held by another payment-confirmed
        application of the same event.
        """
        ...

    async def update_status(
        self, key: str, status: ApplicationStatus,
    ) -> ApplicationRecord: ...
