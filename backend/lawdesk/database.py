"""
LawDesk Backend — Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   A `Database` object owns one engine and one session factory. The app
       factory attaches it to `app.state.database`; `get_db_session` hands out
       one session per request that commits on success and rolls back on error.
Who:   Created by create_app() (or by tests with a temporary SQLite file).

Connection Pooling Strategy:
    PostgreSQL (asyncpg):  pool_size / max_overflow / pre_ping from settings,
                           connections recycled after one hour.
    SQLite (aiosqlite):    driver defaults; pool arguments are not passed.

Why the SQLite BEGIN hook:
    Stores wrap each insert in a SAVEPOINT so a rejected row leaves earlier
    writes of the request intact. The sqlite3 driver starts transactions on
    its own schedule, which breaks SAVEPOINT; SQLAlchemy emits BEGIN instead.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from lawdesk.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object between the models, Alembic and
    `Database.create_all()`.
    """
    pass


def engine_options(settings: Settings) -> Dict[str, Any]:
    """
    Build create_async_engine() keyword arguments for the configured URL.

    SQLite drivers reject queue-pool sizing arguments, so those are only
    passed for server databases.
    """
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


def use_explicit_begin(engine: AsyncEngine) -> None:
    """
    Make SQLAlchemy, not the sqlite3 driver, open transactions.

    Why: the driver defers BEGIN until the first DML statement, so a
    SAVEPOINT issued first opens (and its RELEASE commits) the outer
    transaction. With the driver's handling disabled, begin_nested() nests.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


class Database:
    """
    Owns the engine and session factory for one application instance.

    Replaces a module-level engine so each app (and each test) gets its own
    connection pool.
    """

    def __init__(self, url: str, **options: Any):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **options)
        if url.startswith("sqlite"):
            use_explicit_begin(self.engine)
        # expire_on_commit=False: attributes stay readable after commit,
        # when the response model is built
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, **engine_options(settings))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session; commit on success, roll back on any error.

        The exception is re-raised so the global handlers can respond.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Create any missing tables (development and tests only)."""
        # Import models so they register with Base.metadata
        from lawdesk import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def dispose(self) -> None:
        """Close all pooled connections (application shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Example usage in a route:
        @router.get("/posts")
        async def list_posts(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
