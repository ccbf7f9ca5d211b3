"""
Redis state for an event: the published vote tally and the run lock.

Data layout:
  String — ``tally:{event_id}``          JSON of ``VoteTally.to_dict()``
  Lock   — ``matching:lock:{event_id}``  distributed lock (auto-expiry)
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from redis.exceptions import LockError

from app.config import settings
from app.matching_engine.config import (
    LOCK_TIMEOUT_SECONDS,
    MATCHING_LOCK_PREFIX,
    TALLY_KEY_PREFIX,
)
from app.matching_engine.records import VoteTally

if TYPE_CHECKING:
    import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


def _tally_key(event_id: str) -> str:
    return f"{TALLY_KEY_PREFIX}:{event_id}"


def _lock_key(event_id: str) -> str:
    return f"{MATCHING_LOCK_PREFIX}:{event_id}"


class EventCache:
    """
    Redis-backed tally cache and matching-run lock.

    Accepts a ``redis`` client on construction so callers (and tests)
    can inject their own connection.  Falls back to the module-level
    singleton from ``app.redis_client`` when no client is supplied.
    """

    def __init__(self, redis_client: "aioredis.Redis | None" = None):
        self._redis = redis_client

    @property
    def redis(self) -> "aioredis.Redis":
        if self._redis is not None:
            return self._redis
        from app.redis_client import redis as _default
        return _default

    # ── tally ───────────────────────────────────────────────────────────

    async def publish_tally(self, tally: VoteTally) -> None:
        """Replace the cached tally for ``tally.event_id``."""
        payload = json.dumps(tally.to_dict())
        ttl = settings.TALLY_CACHE_TTL_SECONDS
        if ttl > 0:
            await self.redis.setex(_tally_key(tally.event_id), ttl, payload)
        else:
            await self.redis.set(_tally_key(tally.event_id), payload)

    async def fetch_tally(self, event_id: str) -> VoteTally | None:
        """Return the cached tally, or None if nothing was published."""
        cached = await self.redis.get(_tally_key(event_id))
        if cached is None:
            return None
        return VoteTally.from_dict(json.loads(cached))

    # ── distributed lock ────────────────────────────────────────────────

    async def acquire_lock(self, event_id: str) -> "aioredis.lock.Lock | None":
        """
        Acquire the matching-run lock for *event_id* without blocking.

        Returns the Lock object on success, or ``None`` if another run
        of the same event holds it.
        """
        lock = self.redis.lock(
            _lock_key(event_id),
            timeout=LOCK_TIMEOUT_SECONDS,
            blocking=False,
        )
        acquired = await lock.acquire()
        if acquired:
            return lock
        return None

    async def release_lock(self, lock: "aioredis.lock.Lock") -> None:
        """Release a previously acquired lock."""
        try:
            await lock.release()
        except LockError:
            # Lock may have already expired
            logger.warning("Matching lock release failed (may have auto-expired)")


# Module-level singleton (uses the default redis client)
event_cache = EventCache()
