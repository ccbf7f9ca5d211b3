"""
Database connection setup using async SQLAlchemy with PostgreSQL.

Provides the async engine, the session factory shared by the SQL-backed
stores and the matching engine, and a dependency for injecting sessions
into FastAPI route handlers.
"""

from typing import Callable

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    pool_size=settings.DATABASE_POOL_SIZE,
    echo=settings.DEBUG,
)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# Anything that returns an ``async with``-able AsyncSession
SessionFactory = Callable[[], AsyncSession]

# Stable constraint names so the migrations and the models agree
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


async def get_db() -> AsyncSession:
    """FastAPI dependency that yields a database session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def enum_values(enum_cls) -> list[str]:
    """Persist ``str`` enums by value (``"paid"``) rather than member name."""
    return [member.value for member in enum_cls]
