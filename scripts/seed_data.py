"""
Test data seeder — populates the database with sample data for development.

Usage:
    python scripts/seed_data.py

Creates:
  - 1 event that ended yesterday
  - 12 applications (6 M, 6 F) in various statuses
  - Nicknames for every paid application
  - Rankings for every paid application

Idempotent: skips everything if the seed event already exists.
"""

import asyncio
from datetime import date, timedelta

from app.database import async_session
from app.matching_engine.config import NICKNAME_POOLS
from app.models.application import Application, ApplicationStatus, Gender
from app.models.event import Event
from app.models.preference import Preference

SEED_EVENT_ID = "seed-event-001"

# ---------------------------------------------------------------------------
# Applications — (uid, gender, target status)
# ---------------------------------------------------------------------------

SAMPLE_APPLICATIONS: list[tuple[str, Gender, ApplicationStatus]] = [
    # --- M ------------------------------------------------------------------
    ("uid_m1", Gender.MALE, ApplicationStatus.PAID),
    ("uid_m2", Gender.MALE, ApplicationStatus.PAID),
    ("uid_m3", Gender.MALE, ApplicationStatus.PAID),
    ("uid_m4", Gender.MALE, ApplicationStatus.PAID),
    ("uid_m5", Gender.MALE, ApplicationStatus.APPROVED),
    ("uid_m6", Gender.MALE, ApplicationStatus.REJECTED),
    # --- F ------------------------------------------------------------------
    ("uid_f1", Gender.FEMALE, ApplicationStatus.PAID),
    ("uid_f2", Gender.FEMALE, ApplicationStatus.PAID),
    ("uid_f3", Gender.FEMALE, ApplicationStatus.PAID),
    ("uid_f4", Gender.FEMALE, ApplicationStatus.PAID),
    ("uid_f5", Gender.FEMALE, ApplicationStatus.APPROVED),
    ("uid_f6", Gender.FEMALE, ApplicationStatus.PENDING),
]

# voter → (first, second, third)
SAMPLE_RANKINGS: dict[str, tuple[str | None, str | None, str | None]] = {
    "uid_m1": ("uid_f1", "uid_f2", "uid_f3"),
    "uid_f1": ("uid_m1", "uid_m3", None),        # mutual first with m1
    "uid_m2": ("uid_f1", "uid_f3", "uid_f4"),
    "uid_f3": ("uid_m4", "uid_m2", None),        # second reciprocal with m2
    "uid_m3": ("uid_f2", "uid_f1", "uid_f4"),
    "uid_f4": ("uid_m4", "uid_m1", "uid_m3"),
    "uid_m4": ("uid_f3", "uid_f2", "uid_f4"),
    "uid_f2": ("uid_m2", "uid_m1", "uid_m4"),
}

# The shortest path from PENDING to each target status
_STATUS_PATHS: dict[ApplicationStatus, list[ApplicationStatus]] = {
    ApplicationStatus.PENDING: [],
    ApplicationStatus.APPROVED: [ApplicationStatus.APPROVED],
    ApplicationStatus.PAID: [ApplicationStatus.APPROVED, ApplicationStatus.PAID],
    ApplicationStatus.REJECTED: [ApplicationStatus.REJECTED],
}


def _walk_to_status(application: Application, target: ApplicationStatus) -> None:
    """Transition an application through the valid path to *target*."""
    for step in _STATUS_PATHS[target]:
        application.transition_to(step)


async def seed() -> None:
    async with async_session() as session:
        if await session.get(Event, SEED_EVENT_ID) is not None:
            print(f"  Event {SEED_EVENT_ID} already seeded, nothing to do")
            return

        # ==================================================================
        # 1. EVENT
        # ==================================================================

        event = Event(
            id=SEED_EVENT_ID,
            title="Autumn Rotation Night",
            location="Riverside Hall",
            event_date=date.today() - timedelta(days=1),
            schedule_end="21:30",
        )
        session.add(event)
        await session.flush()

        # ==================================================================
        # 2. APPLICATIONS (+ nicknames for the paid ones, in pool order)
        # ==================================================================

        next_name = {gender: iter(NICKNAME_POOLS[gender.value]) for gender in Gender}
        applications: list[Application] = []
        for uid, gender, target in SAMPLE_APPLICATIONS:
            application = Application(uid=uid, event_id=SEED_EVENT_ID, gender=gender)
            _walk_to_status(application, target)
            if target == ApplicationStatus.PAID:
                application.nickname = next(next_name[gender])
            session.add(application)
            applications.append(application)

        await session.flush()
        print(f"  Applications: {len(applications)} new")

        # ==================================================================
        # 3. RANKINGS
        # ==================================================================

        for voter_id, (first, second, third) in SAMPLE_RANKINGS.items():
            session.add(Preference(
                event_id=SEED_EVENT_ID,
                voter_id=voter_id,
                first=first,
                second=second,
                third=third,
            ))

        await session.commit()
        _print_summary(applications)


def _print_summary(applications: list[Application]) -> None:
    """Print a readable summary of seeded data."""
    print("\n  Seed complete!")
    print(f"  Event: {SEED_EVENT_ID}")
    status_counts: dict[str, int] = {}
    for a in applications:
        status_counts[a.status.value] = status_counts.get(a.status.value, 0) + 1
    for status, count in sorted(status_counts.items()):
        print(f"    {status}: {count}")
    print(f"  Rankings: {len(SAMPLE_RANKINGS)}")


if __name__ == "__main__":
    asyncio.run(seed())
