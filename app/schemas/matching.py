"""
Pydantic schemas for matching runs, previews and vote tallies.
"""

from datetime import datetime

from pydantic import BaseModel


class MatchPairOut(BaseModel):
    """A single pair within a run or preview."""
    event_id: str
    user_a: str
    user_b: str
    tier: str
    score: int


class MatchingPreview(BaseModel):
    """Resolution of the current rankings, nothing persisted."""
    event_id: str
    participants: int
    pairs: list[MatchPairOut]
    unmatched: list[str]


class RunResults(BaseModel):
    total_pairs: int
    by_tier: dict[str, int]
    matched_participants: int
    match_rate_pct: float


class MatchingRunResult(BaseModel):
    """Summary of a completed matching run."""
    run_id: str
    event_id: str
    started_at: datetime
    completed_at: datetime
    duration_ms: int
    participants: int
    results: RunResults
    unmatched: list[str]
    pairs: list[MatchPairOut]


class MatchingRunQueued(BaseModel):
    """A run handed to the background worker, or skipped because one is in progress."""
    event_id: str
    task_id: str | None = None
    skipped: bool = False


# ---------------------------------------------------------------------------
# Tally
# ---------------------------------------------------------------------------


class CandidateTallyOut(BaseModel):
    candidate_id: str
    first: int
    second: int
    third: int
    total_score: int


class VoteTallyResponse(BaseModel):
    """Popularity ranking of an event, most popular first."""
    event_id: str | None
    total_votes: int
    candidates: list[CandidateTallyOut]
