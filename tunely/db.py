"""Database connection and session management."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from .config import Settings, get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


# Global engine and session maker (initialized on startup)
_engine: AsyncEngine | None = None
_async_session_maker: async_sessionmaker[AsyncSession] | None = None


def init_db(settings: Settings) -> None:
    """Initialize database engine and session maker.

    Called from the FastAPI lifespan and from batch scripts.
    """
    global _engine, _async_session_maker

    engine_options: dict[str, object] = {"echo": settings.database_echo}
    if not settings.database_url.startswith("sqlite"):
        engine_options.update(pool_pre_ping=True, pool_size=10, max_overflow=20)

    _engine = create_async_engine(settings.database_url, **engine_options)
    _async_session_maker = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


def get_session_factory(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    if _async_session_maker is None:
        init_db(settings or get_settings())
    assert _async_session_maker is not None
    return _async_session_maker


async def close_db() -> None:
    """Close database connections.

    Called during FastAPI shutdown.
    """
    global _engine, _async_session_maker
    if _engine:
        await _engine.dispose()
    _engine = None
    _async_session_maker = None


async def get_db_session(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    The session commits when the request handler returns and rolls back
    if it raises.
    """
    session_factory = get_session_factory(settings)

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
