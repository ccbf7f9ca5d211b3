"""
Plain data contracts shared by the ledger, resolver, tally and allocator.

These are the shapes the core reads from and writes to its stores; the
ORM models in ``app.models`` are one way of persisting them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from app.matching_engine.config import TIER_SCORES, MatchTier
from app.models.application import ApplicationStatus, Gender


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_choice(value: str | None) -> str | None:
    """Treat blank slots as declined."""
    if value is None:
        return None
    value = value.strip()
    return value or None


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PreferenceRecord:
    """One participant's ranking for one event."""
    event_id: str
    voter_id: str
    first: str | None = None
    second: str | None = None
    third: str | None = None
    message: str | None = None
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def choices(self) -> tuple[str | None, str | None, str | None]:
        return (self.first, self.second, self.third)

    def ranked(self) -> list[str]:
        """Non-empty slots, in rank order."""
        return [c for c in self.choices if c]


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MatchPair:
    event_id: str
    user_a: str
    user_b: str
    tier: MatchTier

    @property
    def score(self) -> int:
        return TIER_SCORES[self.tier]

    @property
    def members(self) -> frozenset[str]:
        return frozenset((self.user_a, self.user_b))

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "user_a": self.user_a,
            "user_b": self.user_b,
            "tier": self.tier.value,
            "score": self.score,
        }


# ---------------------------------------------------------------------------
# Tally
# ---------------------------------------------------------------------------


@dataclass
class CandidateTally:
    candidate_id: str
    first: int = 0
    second: int = 0
    third: int = 0
    total_score: int = 0

    def to_dict(self) -> dict:
        return {
            "candidate_id": self.candidate_id,
            "first": self.first,
            "second": self.second,
            "third": self.third,
            "total_score": self.total_score,
        }


@dataclass
class VoteTally:
    event_id: str | None
    total_votes: int = 0
    candidates: dict[str, CandidateTally] = field(default_factory=dict)

    def ranking(self) -> list[CandidateTally]:
        """Most popular first; ties broken by first/second counts, then id."""
        return sorted(
            self.candidates.values(),
            key=lambda c: (-c.total_score, -c.first, -c.second, c.candidate_id),
        )

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "total_votes": self.total_votes,
            "candidates": [c.to_dict() for c in self.ranking()],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "VoteTally":
        candidates = {
            row["candidate_id"]: CandidateTally(**row)
            for row in data.get("candidates", [])
        }
        return cls(
            event_id=data.get("event_id"),
            total_votes=int(data.get("total_votes", 0)),
            candidates=candidates,
        )


# ---------------------------------------------------------------------------
# Applications (collaborator contract)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ApplicationRecord:
    key: str
    uid: str
    event_id: str
    gender: Gender
    status: ApplicationStatus
    nickname: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.status == ApplicationStatus.PAID

    def with_nickname(self, nickname: str) -> "ApplicationRecord":
        return replace(self, nickname=nickname)

    def with_status(self, status: ApplicationStatus) -> "ApplicationRecord":
        return replace(self, status=status)
