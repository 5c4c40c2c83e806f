"""
Database session management.

Provides the async SQLAlchemy engine, a dependency-injectable session factory
(:func:`session_scope`, serialised on SQLite) and :func:`unit_of_work`, the
single transaction boundary used by every mutating service operation.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from weakref import WeakKeyDictionary

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings
from app.core.exceptions import AppException, InternalError

logger = logging.getLogger(__name__)

# Session.info key marking a session that already holds the SQLite writer lock.
_SQLITE_LOCK_HELD = "sqlite_lock_held"

_sqlite_locks: "WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = WeakKeyDictionary()


def build_engine(url: str, sqlite: bool) -> AsyncEngine:
    """Create the async engine for PostgreSQL or in-memory SQLite."""
    if sqlite:
        # StaticPool makes every connection share the SAME in-memory database.
        from sqlalchemy.pool import StaticPool

        sqlite_engine = create_async_engine(
            url,
            echo=settings.DEBUG,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

        # SQLite does not enforce FK constraints by default.  The listener is
        # attached to the sync engine because aiosqlite wraps a sync connection.
        @event.listens_for(sqlite_engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    return create_async_engine(
        url,
        echo=settings.DEBUG,
        future=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
    )


engine = build_engine(settings.DATABASE_URL, settings.USE_SQLITE)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    # Attribute access after commit() must not trigger an (impossible) sync lazy load.
    expire_on_commit=False,
)


def _sqlite_writer_lock() -> asyncio.Lock:
    """The lock serialising SQLite sessions on the running event loop."""
    loop = asyncio.get_running_loop()
    lock = _sqlite_locks.get(loop)
    if lock is None:
        lock = _sqlite_locks[loop] = asyncio.Lock()
    return lock


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """
    Open a session from :data:`AsyncSessionLocal`.

    On SQLite every session shares the single ``StaticPool`` connection, so
    one session's rollback or close acts on the others' uncommitted work and
    ``FOR UPDATE`` cannot isolate them.  There the whole session lifetime is
    held behind the writer lock; on PostgreSQL sessions run concurrently.
    """
    if engine.dialect.name != "sqlite":
        async with AsyncSessionLocal() as session:
            yield session
        return

    async with _sqlite_writer_lock():
        async with AsyncSessionLocal() as session:
            session.info[_SQLITE_LOCK_HELD] = True
            yield session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an async database session.

    The session is closed when the request finishes.
    """
    async with session_scope() as session:
        yield session


@asynccontextmanager
async def _sqlite_serialised(db: AsyncSession) -> AsyncIterator[None]:
    if db.bind is None or db.bind.dialect.name != "sqlite" or db.info.get(_SQLITE_LOCK_HELD):
        yield
        return

    async with _sqlite_writer_lock():
        yield


@asynccontextmanager
async def unit_of_work(db: AsyncSession, action: str) -> AsyncIterator[AsyncSession]:
    """
    Run one logical write as a single transaction.

    Commits when the block exits cleanly.  Any exception, including task
    cancellation, rolls back everything flushed inside the block, so no
    partially applied write is ever observable.  Domain errors propagate
    unchanged; persistence errors are logged and surface as
    :class:`InternalError` carrying a generic message.

    On SQLite a session not opened through :func:`session_scope` takes the
    writer lock for the duration of the block, so its read-check-write
    sequence cannot interleave with another session's.

    Usage::

        async with unit_of_work(self._repo.db, "adding the beneficiary"):
            ...
    """
    async with _sqlite_serialised(db):
        try:
            yield db
            await db.commit()
        except AppException:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.exception("Database error while %s", action)
            raise InternalError(f"An error occurred while {action}") from exc
        except BaseException:
            await db.rollback()
            raise
