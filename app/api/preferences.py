"""
Ranking endpoints — submit and read post-event preferences, read the tally.

Submit flow:
  1. Load the event and decide whether it has ended
  2. Hand the ranking to the ledger (validation, persist, tally refresh)
  3. Return the stored record
"""

from fastapi import APIRouter, Depends, status

from app.api.deps import get_event, get_preference_ledger
from app.core.errors import NotFoundError
from app.matching_engine.ledger import PreferenceLedger
from app.matching_engine.records import PreferenceRecord
from app.matching_engine.schedule import has_event_ended
from app.models.event import Event
from app.schemas.matching import VoteTallyResponse
from app.schemas.preference import PreferenceResponse, PreferenceSubmitRequest

router = APIRouter()


def _build_response(record: PreferenceRecord) -> PreferenceResponse:
    return PreferenceResponse(
        event_id=record.event_id,
        voter_id=record.voter_id,
        first=record.first,
        second=record.second,
        third=record.third,
        message=record.message,
        created_at=record.created_at,
    )


# ---------------------------------------------------------------------------
# POST /{event_id}/preferences — Submit ranking
# ---------------------------------------------------------------------------


@router.post(
    "/{event_id}/preferences",
    response_model=PreferenceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_preference(
    event_id: str,
    payload: PreferenceSubmitRequest,
    event: Event = Depends(get_event),
    ledger: PreferenceLedger = Depends(get_preference_ledger),
):
    """
    Submit (or resubmit) a participant's ranking for an ended event.

    A later submission by the same voter replaces the earlier one.
    """
    record = await ledger.submit_preference(
        event_id,
        payload.voter_id,
        payload.choices(),
        payload.message,
        event_ended=has_event_ended(event),
    )
    return _build_response(record)


# ---------------------------------------------------------------------------
# GET /{event_id}/preferences/{voter_id}
# ---------------------------------------------------------------------------


@router.get("/{event_id}/preferences/{voter_id}", response_model=PreferenceResponse)
async def get_preference(
    event_id: str,
    voter_id: str,
    ledger: PreferenceLedger = Depends(get_preference_ledger),
):
    """Return the stored ranking of one voter."""
    record = await ledger.preference_store.get(event_id, voter_id)
    if record is None:
        raise NotFoundError(f"No ranking from {voter_id} for event {event_id}")
    return _build_response(record)


# ---------------------------------------------------------------------------
# GET /{event_id}/tally
# ---------------------------------------------------------------------------


@router.get("/{event_id}/tally", response_model=VoteTallyResponse)
async def get_tally(
    event_id: str,
    event: Event = Depends(get_event),
    ledger: PreferenceLedger = Depends(get_preference_ledger),
):
    """
    Weighted popularity ranking (first=3, second=2, third=1).

    Unknown events are a 404 so that a cache miss never publishes a
    tally for an event that does not exist.
    """
    tally = await ledger.get_tally(event_id)
    return tally.to_dict()
