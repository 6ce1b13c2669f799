from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm.exc import StaleDataError

from timed_quiz.core.config import get_settings
from timed_quiz.game.errors import ConcurrentUpdateError, StoreUnavailableError

engine = create_async_engine(
    get_settings().database_url,
    echo=get_settings().db_echo,
    pool_pre_ping=True,
)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)


@asynccontextmanager
async def unit_of_work(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[AsyncSession]:
    """Runs one request's work in a single transaction.

    Store outages and optimistic-lock conflicts are re-raised as game errors so
    callers never have to import SQLAlchemy exceptions.
    """
    session_factory = factory if factory is not None else SessionLocal
    try:
        async with session_factory.begin() as session:
            yield session
    except StaleDataError as exc:
        raise ConcurrentUpdateError(str(exc)) from exc
    except (OperationalError, InterfaceError) as exc:
        raise StoreUnavailableError(str(exc)) from exc
