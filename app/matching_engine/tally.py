"""
Vote tally — popularity view over the same preferences the matcher uses.

Weights: first = 3, second = 2, third = 1.  The tally never feeds back
into match resolution.
"""

from __future__ import annotations

from app.matching_engine.config import WEIGHT_FIRST, WEIGHT_SECOND, WEIGHT_THIRD
from app.matching_engine.records import CandidateTally, PreferenceRecord, VoteTally

_SLOTS = (
    ("first", WEIGHT_FIRST),
    ("second", WEIGHT_SECOND),
    ("third", WEIGHT_THIRD),
)


def compute_vote_tally(
    preferences: list[PreferenceRecord],
    event_id: str | None = None,
) -> VoteTally:
    """
    Count ranked votes per candidate.

    ``total_votes`` is the number of records considered, not the number
    of filled slots.  When *event_id* is omitted it is taken from the
    first record.
    """
    if event_id is None and preferences:
        event_id = preferences[0].event_id

    tally = VoteTally(event_id=event_id, total_votes=len(preferences))

    for record in preferences:
        for slot, weight in _SLOTS:
            candidate_id = getattr(record, slot)
            if not candidate_id:
                continue
            row = tally.candidates.get(candidate_id)
            if row is None:
                row = tally.candidates[candidate_id] = CandidateTally(candidate_id)
            setattr(row, slot, getattr(row, slot) + 1)
            row.total_score += weight

    return tally
