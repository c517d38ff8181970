from __future__ import annotations
"""Async database engine, session factory and declarative base."""
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from fintrack.core.config import settings


class Base(DeclarativeBase):
    """Declarative base for all models."""
    pass


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield a session per request."""
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """Create all tables."""
    # Import models so they register with Base.metadata
    import fintrack.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
