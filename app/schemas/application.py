"""
Pydantic schemas for application status changes and nickname assignment.
"""

from pydantic import BaseModel, Field

from app.models.application import ApplicationStatus, Gender


class NicknameAssignRequest(BaseModel):
    event_id: str = Field(..., min_length=1, max_length=64)
    category: Gender = Field(..., examples=["F"])


class NicknameResponse(BaseModel):
    application_key: str
    event_id: str
    nickname: str


class StatusUpdateRequest(BaseModel):
    status: ApplicationStatus = Field(..., examples=["paid"])


class ApplicationResponse(BaseModel):
    key: str
    uid: str
    event_id: str
    gender: Gender
    status: ApplicationStatus
    nickname: str | None
