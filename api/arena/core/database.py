"""Async database engine and session management.

The engine is built from settings at import time. PostgreSQL (asyncpg) is the
production target; SQLite (aiosqlite) is used for tests and local runs, where
the connection pool options don't apply.

SQLite has no row locks, so SELECT ... FOR UPDATE is a no-op there. Every
SQLite transaction starts with BEGIN IMMEDIATE instead, which takes the
database write lock up front and serialises concurrent writers.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from arena.core.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"echo": settings.database_echo}
    return {
        "echo": settings.database_echo,
        "pool_size": 20,
        "max_overflow": 10,
        "pool_pre_ping": True,
    }


def _serialise_sqlite_writers(async_engine: AsyncEngine) -> None:
    @event.listens_for(async_engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        # The driver would otherwise defer BEGIN until the first write
        dbapi_connection.isolation_level = None

    @event.listens_for(async_engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))
if settings.database_url.startswith("sqlite"):
    _serialise_sqlite_writers(engine)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session. Used as a FastAPI dependency."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create all tables that don't exist yet (dev and test databases)."""
    from arena.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
