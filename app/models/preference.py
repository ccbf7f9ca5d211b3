"""
Preference model — one participant's post-event ranking.

Keyed by ``(event_id, voter_id)`` so a resubmission overwrites the
previous ranking instead of adding a second row.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Preference(Base):
    __tablename__ = "preferences"

    event_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("events.id"), primary_key=True,
    )
    voter_id: Mapped[str] = mapped_column(String(128), primary_key=True)

    first: Mapped[str | None] = mapped_column(String(128))
    second: Mapped[str | None] = mapped_column(String(128))
    third: Mapped[str | None] = mapped_column(String(128))
    message: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return (
            f"<Preference {self.voter_id}@{self.event_id} "
            f"[{self.first or '-'}, {self.second or '-'}, {self.third or '-'}]>"
        )


@event.listens_for(Preference, "init")
def _set_preference_defaults(target, args, kwargs):
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
