"""
Matching run endpoints (organizer).

Provides manual run triggers, either inline or handed to the Celery
worker, and a preview that resolves the current rankings without
persisting anything.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from app.api.deps import get_event, get_matching_engine
from app.matching_engine.engine import MatchingEngine
from app.models.event import Event
from app.schemas.matching import MatchingPreview, MatchingRunQueued, MatchingRunResult
from app.tasks.matching_tasks import run_event_matching

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/{event_id}/matching/run",
    response_model=MatchingRunResult,
    responses={202: {"model": MatchingRunQueued}, 409: {"model": MatchingRunQueued}},
)
async def run_matching(
    event_id: str,
    background: bool = Query(False, description="Dispatch to the Celery worker"),
    event: Event = Depends(get_event),
    engine: MatchingEngine = Depends(get_matching_engine),
):
    """
    Run matching for an event.

    With ``background=true`` the run is queued and 202 is returned with
    the task id.  An inline run that finds another run in progress
    answers 409.
    """
    if background:
        result = run_event_matching.delay(event_id)
        logger.info("Matching run for event %s queued as %s", event_id, result.id)
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content=MatchingRunQueued(event_id=event_id, task_id=result.id).model_dump(),
        )

    report = await engine.run_for_event(event_id)
    if report.get("skipped"):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=MatchingRunQueued(event_id=event_id, skipped=True).model_dump(),
        )
    return report


@router.get("/{event_id}/matching/preview", response_model=MatchingPreview)
async def preview_matching(
    event_id: str,
    event: Event = Depends(get_event),
    engine: MatchingEngine = Depends(get_matching_engine),
):
    """Resolve the current rankings without writing matches."""
    return await engine.preview(event_id)
