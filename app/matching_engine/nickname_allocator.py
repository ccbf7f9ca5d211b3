"""
Nickname allocator — per-event, per-category pseudonyms.

Each category has a fixed pool of eight names.  A name is taken while a
payment-confirmed application of the same event holds it.  Assignment
is an optimistic read-decide-write:

  1. Read the event's applications, collect the taken names
  2. Pick uniformly at random among the free names of the pool
  3. Commit with the store's compare-and-set (expected: no nickname)
  4. On conflict, back off and start again from step 1

The store's compare-and-set is the only serialisation point, so the
allocator itself holds no lock and is safe to run on several workers.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING, Awaitable, Callable

from app.core.errors import (
    NotFoundError,
    PoolExhaustedError,
    TransientAllocationError,
    ValidationError,
)
from app.matching_engine.config import (
    NICKNAME_BACKOFF_SECONDS,
    NICKNAME_MAX_ATTEMPTS,
    NICKNAME_POOLS,
)
from app.models.application import Gender

if TYPE_CHECKING:
    from app.stores.base import ApplicationStore

logger = logging.getLogger(__name__)


def free_nicknames(category: Gender, taken: set[str]) -> list[str]:
    """Pool names of *category* not in *taken*, in pool order."""
    return [name for name in NICKNAME_POOLS[category.value] if name not in taken]


class NicknameAllocator:
    """Assigns nicknames through an ``ApplicationStore`` compare-and-set."""

    def __init__(
        self,
        application_store: "ApplicationStore | None" = None,
        max_attempts: int = NICKNAME_MAX_ATTEMPTS,
        backoff_seconds: float = NICKNAME_BACKOFF_SECONDS,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._application_store = application_store
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self._rng = rng or random.SystemRandom()
        self._sleep = sleep

    @property
    def application_store(self) -> "ApplicationStore":
        if self._application_store is not None:
            return self._application_store
        from app.stores.sql import application_store
        return application_store

    async def assign_nickname(
        self, application_key: str, event_id: str, category: Gender,
    ) -> str:
        """
        Return the nickname of *application_key*, assigning one if unset.

        An existing nickname is returned as is, even if the application
        has since been rejected.

        Raises:
            NotFoundError: no such application in *event_id*.
            ValidationError: category mismatch or application not paid
                (checked only when a name has to be assigned).
            PoolExhaustedError: every name of the category pool is taken.
            TransientAllocationError: conflicts persisted past the
                retry budget.
        """
        category = Gender(category)

        for attempt in range(1, self.max_attempts + 1):
            record = await self.application_store.get_by_key(application_key)
            if record is None or record.event_id != event_id:
                raise NotFoundError(
                    f"Application {application_key} not found in event {event_id}"
                )
            # Once named, always named: no status or category check
            if record.nickname is not None:
                return record.nickname
            if record.gender != category:
                raise ValidationError(
                    f"Application {application_key} is not in category {category.value}"
                )
            if not record.is_paid:
                raise ValidationError(
                    f"Application {application_key} is not payment-confirmed"
                )

            applications = await self.application_store.list_by_event(event_id)
            taken = {
                a.nickname for a in applications
                if a.is_paid and a.nickname is not None
            }
            available = free_nicknames(category, taken)
            if not available:
                logger.warning(
                    "Nickname pool %s exhausted for event %s", category.value, event_id,
                )
                raise PoolExhaustedError(
                    f"No {category.value} nicknames left for event {event_id}"
                )

            choice = self._rng.choice(available)
            if await self.application_store.compare_and_set_nickname(
                application_key, None, choice,
            ):
                logger.info(
                    "Nickname %s assigned to application %s (attempt %d)",
                    choice, application_key, attempt,
                )
                return choice

            logger.info(
                "Nickname conflict for application %s on %s (attempt %d/%d)",
                application_key, choice, attempt, self.max_attempts,
            )
            if attempt < self.max_attempts:
                await self._sleep(self.backoff_seconds * attempt)

        logger.error(
            "Nickname assignment for %s gave up after %d attempts",
            application_key, self.max_attempts,
        )
        raise TransientAllocationError(
            f"Could not assign a nickname to {application_key}, try again"
        )


# Module-level singleton (uses the SQL application store)
nickname_allocator = NicknameAllocator()
