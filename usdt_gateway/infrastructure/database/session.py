"""Async SQLAlchemy engine and session management.

Allocations from concurrent requests are serialised only by the
``uq_orders_pending_slot`` index, so every request works in its own session
and short transactions are preferred.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from usdt_gateway.core.config import DatabaseSettings, get_settings
from usdt_gateway.infrastructure.database.base import Base

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _enable_sqlite_wal(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def create_engine_from_settings(database: DatabaseSettings) -> AsyncEngine:
    engine_kwargs: dict[str, Any] = {"echo": database.echo}
    is_sqlite = database.url.startswith("sqlite")
    if is_sqlite:
        # 等待其他连接释放写锁，而不是立即报 database is locked
        engine_kwargs["connect_args"] = {"timeout": database.busy_timeout}
    else:
        if database.pool_size is not None:
            engine_kwargs["pool_size"] = database.pool_size
        if database.max_overflow is not None:
            engine_kwargs["max_overflow"] = database.max_overflow

    engine = create_async_engine(database.url, **engine_kwargs)
    if is_sqlite and ":memory:" not in database.url:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_wal)
    return engine


def get_engine() -> AsyncEngine:
    global _engine, _session_factory
    if _engine is None:
        _engine = create_engine_from_settings(get_settings().database)
        _session_factory = async_sessionmaker(bind=_engine, class_=AsyncSession, expire_on_commit=False)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        get_engine()
    assert _session_factory is not None
    return _session_factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; commits on success, rolls back on error."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create tables directly (development and tests; production uses alembic)."""
    from usdt_gateway.db import models  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
