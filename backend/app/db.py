from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from app.config import get_settings
from app.exceptions import AppError, TransientPersistenceError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return the singleton async engine, creating it on first call."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.debug,
            pool_pre_ping=True,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the singleton async session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an async database session."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def create_tables() -> None:
    """Create any missing tables from the SQLModel metadata."""
    import app.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose the engine and reset singletons. Call on app shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def commit_or_raise(session: AsyncSession, conflict_message: str = "Conflicting update") -> None:
    """Commit, translating database failures into application errors.

    Constraint violations become a 409. Lost connections and similar
    operational failures become TransientPersistenceError so the caller can
    retry. The session is rolled back in both cases.
    """
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise AppError(conflict_message, status_code=409) from None
    except (OperationalError, InterfaceError) as exc:
        await session.rollback()
        logger.exception("Commit failed")
        raise TransientPersistenceError from exc
