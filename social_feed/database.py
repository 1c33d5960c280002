"""
Async SQLAlchemy engine + session factory.

The default store is an in-memory SQLite database reached through the
aiosqlite driver. An in-memory database lives as long as its connection, so
for ``:memory:`` URLs every session shares one connection (StaticPool), and
request sessions take turns on it: ``get_db`` holds the application's session
lock from the first statement until commit or rollback, so one request never
sees or rolls back another's uncommitted writes.
Each application instance builds its own engine and lock at startup.
"""
import asyncio
import logging
from contextlib import nullcontext
from typing import Optional

from fastapi import Request
from sqlalchemy.ext import asyncio as sa_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from social_feed.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def is_memory_database(settings: Settings) -> bool:
    return ":memory:" in settings.database_url


def create_engine(settings: Settings) -> AsyncEngine:
    # Resolved at call time: tracing instrumentation patches the module attribute
    create_async_engine = sa_asyncio.create_async_engine
    if is_memory_database(settings):
        return create_async_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.sql_echo,
        )
    return create_async_engine(
        settings.database_url,
        pool_pre_ping=True,
        echo=settings.sql_echo,
    )


def create_session_lock(settings: Settings) -> Optional[asyncio.Lock]:
    """One request session at a time on the shared in-memory connection."""
    if is_memory_database(settings):
        return asyncio.Lock()
    return None


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables if they don't exist (idempotent)."""
    # Import registers the mapped classes on Base.metadata
    from social_feed import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")


async def get_db(request: Request):
    """FastAPI dependency that yields an async DB session."""
    lock = request.app.state.session_lock or nullcontext()
    async with lock:
        async with request.app.state.sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
