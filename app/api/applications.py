"""
Application endpoints (organizer) — status changes and nicknames.

Confirming payment (``paid``) assigns the participant a nickname from
their category's pool in the same request.  If the pool is exhausted or
the assignment keeps conflicting the status change still stands and the
error is returned; the nickname endpoint can be retried on its own.
"""

import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_application_store, get_nickname_allocator
from app.core.errors import NotFoundError, ValidationError
from app.matching_engine.nickname_allocator import NicknameAllocator
from app.matching_engine.records import ApplicationRecord
from app.models.application import ApplicationStatus
from app.schemas.application import (
    ApplicationResponse,
    NicknameAssignRequest,
    NicknameResponse,
    StatusUpdateRequest,
)
from app.stores.base import ApplicationStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _build_response(record: ApplicationRecord) -> ApplicationResponse:
    return ApplicationResponse(
        key=record.key,
        uid=record.uid,
        event_id=record.event_id,
        gender=record.gender,
        status=record.status,
        nickname=record.nickname,
    )


# ---------------------------------------------------------------------------
# POST /{key}/nickname
# ---------------------------------------------------------------------------


@router.post("/{key}/nickname", response_model=NicknameResponse)
async def assign_nickname(
    key: str,
    payload: NicknameAssignRequest,
    allocator: NicknameAllocator = Depends(get_nickname_allocator),
):
    """Assign a nickname, or return the one already held."""
    nickname = await allocator.assign_nickname(key, payload.event_id, payload.category)
    return NicknameResponse(
        application_key=key,
        event_id=payload.event_id,
        nickname=nickname,
    )


# ---------------------------------------------------------------------------
# PATCH /{key}/status
# ---------------------------------------------------------------------------


@router.patch("/{key}/status", response_model=ApplicationResponse)
async def update_status(
    key: str,
    payload: StatusUpdateRequest,
    store: ApplicationStore = Depends(get_application_store),
    allocator: NicknameAllocator = Depends(get_nickname_allocator),
):
    """
    Move an application through its lifecycle.

    pending → approved | rejected, approved → paid | rejected,
    paid → rejected.  Anything else answers 422.
    """
    try:
        record = await store.update_status(key, payload.status)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    logger.info("Application %s moved to %s", key, record.status.value)

    if record.status == ApplicationStatus.PAID:
        nickname = await allocator.assign_nickname(key, record.event_id, record.gender)
        record = record.with_nickname(nickname)

    return _build_response(record)


@router.get("/{key}", response_model=ApplicationResponse)
async def get_application(
    key: str,
    store: ApplicationStore = Depends(get_application_store),
):
    record = await store.get_by_key(key)
    if record is None:
        raise NotFoundError(f"Application {key} not found")
    return _build_response(record)
