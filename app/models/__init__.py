"""SQLAlchemy ORM models for the rotation dating service."""

from app.models.event import Event
from app.models.application import Application, ApplicationStatus, Gender
from app.models.preference import Preference
from app.models.match import Match, MatchTier

__all__ = [
    "Event",
    "Application", "ApplicationStatus", "Gender",
    "Preference",
    "Match", "MatchTier",
]
