"""
Stand-up Room – Async SQLAlchemy engine, session, declarative base and the
transaction-scoped ``Store`` every operation runs through.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from standup.config import settings
from standup.utils.retry import with_db_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_sqlite(database_url: str) -> bool:
    return database_url.startswith(("sqlite://", "sqlite+aiosqlite://"))


def build_engine(database_url: str, **kwargs: Any) -> AsyncEngine:
    """Create the async engine with backend-specific connection tweaks."""
    engine_kwargs: dict[str, Any] = {"echo": settings.DEBUG, "future": True, **kwargs}

    # PgBouncer in transaction mode cannot serve asyncpg prepared statements.
    if "postgresql" in database_url:
        engine_kwargs.setdefault("connect_args", {"statement_cache_size": 0})

    engine = create_async_engine(database_url, **engine_kwargs)

    if is_sqlite(database_url):
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


# ── Engine (one per process) ──
engine = build_engine(settings.DATABASE_URL)

# ── Session factory ──
async_session = build_session_maker(engine)


# ── Declarative base ──
class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class Store:
    """
    Runs each operation in its own session and single transaction.

    ``run(operation, *args)`` calls ``operation(session, *args)`` inside
    ``session.begin()``: everything the operation writes commits together
    or not at all. The whole unit of work is retried on connection-shaped
    failures (``DB_MAX_ATTEMPTS`` attempts in total); other errors,
    including ``AppError``, roll back and propagate.

    SQLite allows one writer at a time, so for SQLite URLs units of work
    are serialized with an ``asyncio.Lock``.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        max_attempts: int = settings.DB_MAX_ATTEMPTS,
        serialize: bool = False,
    ):
        self.session_maker = session_maker
        self.max_attempts = max_attempts
        self._lock = asyncio.Lock() if serialize else None

    async def run(self, operation: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        async def attempt() -> T:
            if self._lock is None:
                return await self._run_once(operation, *args, **kwargs)
            async with self._lock:
                return await self._run_once(operation, *args, **kwargs)

        return await with_db_retry(attempt, max_attempts=self.max_attempts)

    async def _run_once(self, operation: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        async with self.session_maker() as session:
            async with session.begin():
                return await operation(session, *args, **kwargs)

    async def ping(self) -> None:
        """Trivial connectivity probe (``SELECT 1``)."""
        async with self.session_maker() as session:
            await session.execute(text("SELECT 1"))


def create_store(
    session_maker: async_sessionmaker[AsyncSession] = async_session,
    database_url: str = settings.DATABASE_URL,
) -> Store:
    return Store(session_maker, serialize=is_sqlite(database_url))


async def init_database(bind: AsyncEngine = engine) -> None:
    """Create all tables. Idempotent (CREATE TABLE IF NOT EXISTS)."""
    import standup.models  # noqa: F401 - registers every model on Base.metadata

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


# ── Dependency for FastAPI routes ──
def get_store(request: Request) -> Store:
    """Return the process-wide ``Store`` created in the app lifespan."""
    return request.app.state.store
