"""Database engine and session helpers."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine.url import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from .base import Base
from . import models  # noqa: F401  # ensure models are imported for metadata

_ASYNC_DRIVERS = {
    "sqlite": "sqlite+aiosqlite",
    "sqlite+pysqlite": "sqlite+aiosqlite",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
    "postgres": "postgresql+asyncpg",
    "mysql": "mysql+aiomysql",
    "mysql+pymysql": "mysql+aiomysql",
    "mariadb": "mariadb+aiomysql",
}


def resolve_async_database_url(raw_url: str) -> str:
    """Map a sync driver onto its async counterpart and prepare sqlite paths."""

    url: URL = make_url(raw_url)
    async_driver = _ASYNC_DRIVERS.get(url.drivername, url.drivername)
    url = url.set(drivername=async_driver)
    if url.drivername.startswith("sqlite") and url.database and url.database != ":memory:":
        db_path = Path(url.database).expanduser()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        url = url.set(database=str(db_path))
    return url.render_as_string(hide_password=False)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def create_database_engine(raw_url: str) -> AsyncEngine:
    url = resolve_async_database_url(raw_url)
    if url.startswith("sqlite"):
        # sqlite connections are cheap; a fresh one per session avoids sharing
        # a connection between event loops.
        engine = create_async_engine(url, echo=False, poolclass=NullPool)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_async_engine(url, echo=False, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables directly from metadata (tests and throwaway setups)."""

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


__all__ = [
    "Base",
    "create_database_engine",
    "create_schema",
    "create_session_factory",
    "resolve_async_database_url",
]
