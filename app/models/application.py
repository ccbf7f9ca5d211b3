"""
Application model — one participant's application to one event.

- 4-state lifecycle with validated transitions
- Gender doubles as the matching/nickname category
- Nickname is assigned once, after payment is confirmed, and never released
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Enum as SAEnum,
    event,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, enum_values

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Gender(str, enum.Enum):
    MALE = "M"
    FEMALE = "F"

    @property
    def opposite(self) -> "Gender":
        return Gender.FEMALE if self is Gender.MALE else Gender.MALE


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    REJECTED = "rejected"


# ---------------------------------------------------------------------------
# Status transition map
# ---------------------------------------------------------------------------

VALID_TRANSITIONS: dict[ApplicationStatus, set[ApplicationStatus]] = {
    ApplicationStatus.PENDING: {
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
    },
    ApplicationStatus.APPROVED: {
        ApplicationStatus.PAID,
        ApplicationStatus.REJECTED,
    },
    ApplicationStatus.PAID: {
        ApplicationStatus.REJECTED,
    },
    ApplicationStatus.REJECTED: set(),
}

# Statuses whose holders may be ranked by other participants
RANKABLE_STATUSES = frozenset({ApplicationStatus.APPROVED, ApplicationStatus.PAID})


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("event_id", "uid", name="uq_applications_event_uid"),
        # Two paid participants of one event can never share a nickname
        Index(
            "uq_applications_event_nickname_paid",
            "event_id",
            "nickname",
            unique=True,
            postgresql_where=text("nickname IS NOT NULL AND status = 'paid'"),
        ),
    )

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: uuid.uuid4().hex,
    )
    uid: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    event_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("events.id"), nullable=False, index=True,
    )

    gender: Mapped[Gender] = mapped_column(
        SAEnum(Gender, name="gender", values_callable=enum_values), nullable=False,
    )
    status: Mapped[ApplicationStatus] = mapped_column(
        SAEnum(ApplicationStatus, name="applicationstatus", values_callable=enum_values),
        default=ApplicationStatus.PENDING,
    )
    nickname: Mapped[str | None] = mapped_column(String(32))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    event = relationship("Event", back_populates="applications")

    # ------------------------------------------------------------------
    # Status transition validation
    # ------------------------------------------------------------------

    @staticmethod
    def is_valid_transition(from_status: ApplicationStatus, to_status: ApplicationStatus) -> bool:
        """Check whether a status transition is allowed."""
        allowed = VALID_TRANSITIONS.get(from_status, set())
        return to_status in allowed

    def transition_to(self, new_status: ApplicationStatus) -> None:
        """
        Transition to *new_status* if the move is valid.

        Raises ValueError if the transition is not allowed.
        """
        if not self.is_valid_transition(self.status, new_status):
            raise ValueError(
                f"Invalid transition: {self.status.value} -> {new_status.value}"
            )
        self.status = new_status
        self.updated_at = datetime.now(timezone.utc)

    def __repr__(self) -> str:
        return (
            f"<Application {self.uid}@{self.event_id} "
            f"{self.gender.value if self.gender else '?'} "
            f"status={self.status.value if self.status else 'N/A'} "
            f"nickname={self.nickname or '-'}>"
        )


@event.listens_for(Application, "init")
def _set_application_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4().hex
    if "status" not in kwargs:
        target.status = ApplicationStatus.PENDING
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
    if "updated_at" not in kwargs:
        target.updated_at = datetime.now(timezone.utc)
