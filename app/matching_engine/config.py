"""
Matching engine configuration constants.

Defines tier scores, tally weights, nickname pools, Redis keys and the
retry policy used by the ranking and nickname core.
"""

import enum

from app.config import settings


class MatchTier(str, enum.Enum):
    MUTUAL_FIRST = "mutual_first"
    SECOND_RECIPROCAL = "second_reciprocal"
    THIRD_RECIPROCAL = "third_reciprocal"


# Score attached to a pair, by the tier that produced it
TIER_SCORES: dict[MatchTier, int] = {
    MatchTier.MUTUAL_FIRST: 10,
    MatchTier.SECOND_RECIPROCAL: 7,
    MatchTier.THIRD_RECIPROCAL: 5,
}

# Popularity weights per ranked slot
WEIGHT_FIRST = 3
WEIGHT_SECOND = 2
WEIGHT_THIRD = 1

# Nickname pools — exactly eight per category, disjoint
NICKNAME_POOLS: dict[str, tuple[str, ...]] = {
    "M": ("Pine", "Cedar", "Maple", "Oak", "Birch", "Willow", "Aspen", "Elm"),
    "F": ("Rose", "Lily", "Iris", "Daisy", "Tulip", "Violet", "Jasmine", "Camellia"),
}
POOL_SIZE = 8

# Redis keys
TALLY_KEY_PREFIX = "tally"
MATCHING_LOCK_PREFIX = "matching:lock"

LOCK_TIMEOUT_SECONDS = settings.MATCHING_LOCK_TIMEOUT_SECONDS

# Nickname commit retry policy
NICKNAME_MAX_ATTEMPTS = settings.NICKNAME_MAX_ATTEMPTS
NICKNAME_BACKOFF_SECONDS = settings.NICKNAME_BACKOFF_SECONDS
