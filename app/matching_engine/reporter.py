"""
Run reporting — builds structured reports for matching runs.

Generates summary data for the organizer dashboard and the run logs
after each matching run completes.
"""

from datetime import datetime

from app.matching_engine.config import MatchTier
from app.matching_engine.records import MatchPair


def build_run_report(
    run_id: str,
    event_id: str,
    started_at: datetime,
    completed_at: datetime,
    pairs: list[MatchPair],
    unmatched: list[str],
    participants: int,
) -> dict:
    """
    Build a structured report for a completed matching run.

    Summarises pairs per tier, who stayed unmatched and the share of
    participants that were paired.
    """
    tier_counts = {tier.value: 0 for tier in MatchTier}
    for pair in pairs:
        tier_counts[pair.tier.value] += 1

    matched_count = 2 * len(pairs)
    duration = completed_at - started_at

    if participants > 0:
        match_rate = round(matched_count / participants * 100, 2)
    else:
        match_rate = 0.0

    return {
        "run_id": run_id,
        "event_id": event_id,
        "started_at": started_at.isoformat(),
        "completed_at": completed_at.isoformat(),
        "duration_ms": int(duration.total_seconds() * 1000),
        "participants": participants,
        "results": {
            "total_pairs": len(pairs),
            "by_tier": tier_counts,
            "matched_participants": matched_count,
            "match_rate_pct": match_rate,
        },
        "unmatched": unmatched,
        "pairs": [pair.to_dict() for pair in pairs],
    }
