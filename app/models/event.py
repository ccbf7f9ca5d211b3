"""
Event model — a single rotation dating event.

Only the fields the ranking core reads are modelled here: the date and
the two ways an organizer records when the event ends (an explicit
``end_time`` or the ``schedule_end`` "HH:MM" of the last session).
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, Integer, String, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: uuid.uuid4().hex,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str | None] = mapped_column(String(200))

    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    schedule_end: Mapped[str | None] = mapped_column(String(5))  # "HH:MM"

    max_participants: Mapped[int] = mapped_column(Integer, default=16)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    applications = relationship("Application", back_populates="event")

    def __repr__(self) -> str:
        return f"<Event {self.id} {self.title!r} on {self.event_date}>"


@event.listens_for(Event, "init")
def _set_event_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4().hex
    if "max_participants" not in kwargs:
        target.max_participants = 16
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
