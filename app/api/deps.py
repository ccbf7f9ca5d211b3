"""
Reusable FastAPI dependencies for the ranking and nickname core.

Dependencies:
  - get_event                 — loads the Event of the path (404 if missing)
  - get_preference_store      — SQL preference store
  - get_application_store     — SQL application store
  - get_preference_ledger     — PreferenceLedger singleton
  - get_nickname_allocator    — NicknameAllocator singleton
  - get_matching_engine       — MatchingEngine singleton

Tests swap any of these through ``app.dependency_overrides``.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError
from app.database import get_db
from app.matching_engine.engine import MatchingEngine, matching_engine
from app.matching_engine.ledger import PreferenceLedger, preference_ledger
from app.matching_engine.nickname_allocator import NicknameAllocator, nickname_allocator
from app.models.event import Event
from app.stores.base import ApplicationStore, PreferenceStore
from app.stores.sql import application_store, preference_store


async def get_event(event_id: str, db: AsyncSession = Depends(get_db)) -> Event:
    """Load the event named in the path, or answer 404."""
    event = await db.get(Event, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return event


def get_preference_store() -> PreferenceStore:
    return preference_store


def get_application_store() -> ApplicationStore:
    return application_store


def get_preference_ledger() -> PreferenceLedger:
    return preference_ledger


def get_nickname_allocator() -> NicknameAllocator:
    return nickname_allocator


def get_matching_engine() -> MatchingEngine:
    return matching_engine
