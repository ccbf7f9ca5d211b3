"""
PostgreSQL-backed stores (async SQLAlchemy).

The nickname compare-and-set is a single conditional UPDATE:

    UPDATE applications SET nickname = :new
     WHERE id = :key
       AND status = 'paid'
       AND nickname IS NOT DISTINCT FROM :expected
       AND NOT EXISTS (another paid application of the event holding :new)

Two such statements racing under READ COMMITTED can both pass the
NOT EXISTS check; the partial unique index
``uq_applications_event_nickname_paid`` rejects the loser, which is
reported as a conflict like any other.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased

from app.core.errors import NotFoundError
from app.database import SessionFactory
from app.matching_engine.records import ApplicationRecord, PreferenceRecord
from app.models.application import Application, ApplicationStatus
from app.models.preference import Preference

logger = logging.getLogger(__name__)


def _to_preference_record(row: Preference) -> PreferenceRecord:
    return PreferenceRecord(
        event_id=row.event_id,
        voter_id=row.voter_id,
        first=row.first,
        second=row.second,
        third=row.third,
        message=row.message,
        created_at=row.created_at,
    )


def _to_application_record(row: Application) -> ApplicationRecord:
    return ApplicationRecord(
        key=row.id,
        uid=row.uid,
        event_id=row.event_id,
        gender=row.gender,
        status=row.status,
        nickname=row.nickname,
    )


class _SessionBound:
    """Lazily resolves the default session factory, like the engine does."""

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory

    @property
    def session_factory(self) -> SessionFactory:
        if self._session_factory is not None:
            return self._session_factory
        from app.database import async_session
        return async_session


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------


class SqlPreferenceStore(_SessionBound):

    async def put(self, record: PreferenceRecord) -> None:
        """Insert or overwrite the ranking of ``(event_id, voter_id)``."""
        values = {
            "event_id": record.event_id,
            "voter_id": record.voter_id,
            "first": record.first,
            "second": record.second,
            "third": record.third,
            "message": record.message,
            "created_at": record.created_at,
        }
        stmt = pg_insert(Preference).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Preference.event_id, Preference.voter_id],
            set_={k: stmt.excluded[k] for k in values if k not in ("event_id", "voter_id")},
        )
        async with self.session_factory() as session:
            async with session.begin():
                await session.execute(stmt)

    async def get(self, event_id: str, voter_id: str) -> PreferenceRecord | None:
        async with self.session_factory() as session:
            row = await session.get(Preference, (event_id, voter_id))
            return _to_preference_record(row) if row else None

    async def list_by_event(self, event_id: str) -> list[PreferenceRecord]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Preference).where(Preference.event_id == event_id)
            )
            return [_to_preference_record(row) for row in result.scalars().all()]


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


class SqlApplicationStore(_SessionBound):

    async def get(self, event_id: str, uid: str) -> ApplicationRecord | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Application).where(
                    Application.event_id == event_id,
                    Application.uid == uid,
                )
            )
            row = result.scalar_one_or_none()
            return _to_application_record(row) if row else None

    async def get_by_key(self, key: str) -> ApplicationRecord | None:
        async with self.session_factory() as session:
            row = await session.get(Application, key)
            return _to_application_record(row) if row else None

    async def list_by_event(self, event_id: str) -> list[ApplicationRecord]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Application).where(Application.event_id == event_id)
            )
            return [_to_application_record(row) for row in result.scalars().all()]

    async def compare_and_set_nickname(
        self, key: str, expected: str | None, new: str,
    ) -> bool:
        other = aliased(Application)
        holder_exists = (
            select(other.id)
            .where(
                other.event_id == Application.event_id,
                other.id != key,
                other.status == ApplicationStatus.PAID,
                other.nickname == new,
            )
            .exists()
        )
        stmt = (
            update(Application)
            .where(
                Application.id == key,
                Application.status == ApplicationStatus.PAID,
                Application.nickname.is_not_distinct_from(expected),
                ~holder_exists,
            )
            .values(nickname=new, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )

        async with self.session_factory() as session:
            try:
                async with session.begin():
                    result = await session.execute(stmt)
            except IntegrityError:
                logger.info("Nickname %r for application %s lost a race", new, key)
                return False

            if result.rowcount == 1:
                return True

            if await session.get(Application, key) is None:
                raise NotFoundError(f"Application {key} not found")
            return False

    async def update_status(
        self, key: str, status: ApplicationStatus,
    ) -> ApplicationRecord:
        async with self.session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    select(Application)
                    .where(Application.id == key)
                    .with_for_update()
                )
                row = result.scalar_one_or_none()
                if row is None:
                    raise NotFoundError(f"Application {key} not found")
                row.transition_to(status)
            return _to_application_record(row)


# Module-level singletons (use the default session factory)
preference_store = SqlPreferenceStore()
application_store = SqlApplicationStore()
