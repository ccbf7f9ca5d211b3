"""
Pydantic schemas for ranking submission and lookup.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class PreferenceSubmitRequest(BaseModel):
    """Up to three ranked counterparts; blank or null slots are declined."""
    voter_id: str = Field(..., min_length=1, max_length=128, examples=["uid_a"])
    first: str | None = Field(None, max_length=128, examples=["uid_b"])
    second: str | None = Field(None, max_length=128)
    third: str | None = Field(None, max_length=128)
    message: str | None = Field(None, max_length=1000)

    def choices(self) -> dict[str, str | None]:
        return {"first": self.first, "second": self.second, "third": self.third}


class PreferenceResponse(BaseModel):
    event_id: str
    voter_id: str
    first: str | None
    second: str | None
    third: str | None
    message: str | None
    created_at: datetime
