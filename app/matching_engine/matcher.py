"""
Match resolution — pairs participants from their ranked preferences.

Each record is visited once, in the order given.  A record is tested
against three tiers, strongest first, and the first tier that finds an
unmatched reciprocating counterpart wins:

    tier                    this voter's slot   counterpart names voter in
    ──────────────────────  ──────────────────  ──────────────────────────
    mutual_first      (10)  first               first
    second_reciprocal  (7)  second              first or second
    third_reciprocal   (5)  third               first, second or third

Both members leave the candidate set once paired, so the outcome
depends on the input order.  ``MatchingEngine`` sorts by
``(created_at, voter_id)`` before calling in here.
"""

from __future__ import annotations

from app.matching_engine.config import MatchTier
from app.matching_engine.records import MatchPair, PreferenceRecord

# (tier, index of this voter's slot, how many of the counterpart's slots count)
_TIER_RULES: tuple[tuple[MatchTier, int, int], ...] = (
    (MatchTier.MUTUAL_FIRST, 0, 1),
    (MatchTier.SECOND_RECIPROCAL, 1, 2),
    (MatchTier.THIRD_RECIPROCAL, 2, 3),
)


# ── Helpers ─────────────────────────────────────────────────────────────


def _index_by_voter(preferences: list[PreferenceRecord]) -> dict[str, PreferenceRecord]:
    """Map voter → record; the first record of a repeated voter wins."""
    by_voter: dict[str, PreferenceRecord] = {}
    for record in preferences:
        by_voter.setdefault(record.voter_id, record)
    return by_voter


def _reciprocates(counterpart: PreferenceRecord, voter_id: str, depth: int) -> bool:
    """True if *counterpart* names *voter_id* within its first *depth* slots."""
    return voter_id in counterpart.choices[:depth]


def _find_partner(
    record: PreferenceRecord,
    by_voter: dict[str, PreferenceRecord],
    matched: set[str],
) -> tuple[str, MatchTier] | None:
    """Return ``(partner_id, tier)`` for the strongest reciprocated slot."""
    for tier, slot, depth in _TIER_RULES:
        target = record.choices[slot]
        if not target or target == record.voter_id or target in matched:
            continue
        counterpart = by_voter.get(target)
        if counterpart is None:
            continue
        if _reciprocates(counterpart, record.voter_id, depth):
            return target, tier
    return None


# ── Resolution ─────────────────────────────────────────────────────────


def resolve_matches(preferences: list[PreferenceRecord]) -> list[MatchPair]:
    """
    Resolve ranked preferences into exclusive, score-tiered pairs.

    Pure and total: references to voters with no record, empty slots
    and self-references simply never produce a pair.  No participant
    appears in more than one returned pair.
    """
    by_voter = _index_by_voter(preferences)
    matched: set[str] = set()
    pairs: list[MatchPair] = []

    for record in preferences:
        if record.voter_id in matched:
            continue
        if by_voter[record.voter_id] is not record:
            continue  # shadowed duplicate

        found = _find_partner(record, by_voter, matched)
        if found is None:
            continue

        partner, tier = found
        pairs.append(MatchPair(
            event_id=record.event_id,
            user_a=record.voter_id,
            user_b=partner,
            tier=tier,
        ))
        matched.add(record.voter_id)
        matched.add(partner)

    return pairs


def unmatched_voters(
    preferences: list[PreferenceRecord],
    pairs: list[MatchPair],
) -> list[str]:
    """Voters (in input order, deduplicated) who ended up in no pair."""
    paired: set[str] = set()
    for pair in pairs:
        paired |= pair.members

    seen: set[str] = set()
    result: list[str] = []
    for record in preferences:
        if record.voter_id in paired or record.voter_id in seen:
            continue
        seen.add(record.voter_id)
        result.append(record.voter_id)
    return result
