"""
Match record model — persisted output of an organizer's matching run.

Each run of the matching engine replaces the rows of the previous run
for the same event; all rows of one run share a ``run_id``.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Enum as SAEnum,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, enum_values
from app.matching_engine.config import MatchTier


class Match(Base):
    __tablename__ = "matches"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: uuid.uuid4().hex,
    )
    run_id: Mapped[str] = mapped_column(String(50), nullable=False)
    event_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("events.id"), nullable=False, index=True,
    )

    user_a: Mapped[str] = mapped_column(String(128), nullable=False)
    user_b: Mapped[str] = mapped_column(String(128), nullable=False)

    tier: Mapped[MatchTier] = mapped_column(
        SAEnum(MatchTier, name="matchtier", values_callable=enum_values),
        nullable=False,
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False)

    matched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return (
            f"<Match {self.run_id} {self.user_a}<->{self.user_b} "
            f"score={self.score}>"
        )


@event.listens_for(Match, "init")
def _set_match_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4().hex
    if "matched_at" not in kwargs:
        target.matched_at = datetime.now(timezone.utc)
