"""
Database connection management.

Provides the async SQLAlchemy engine and session factory for the chunk
index. SQLite connections run in WAL mode so readers keep a consistent
snapshot while a writer appends.

Dependencies: sqlalchemy, aiosqlite, vectorqa.configs
System role: Database connection lifecycle management
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vectorqa.configs import get_settings


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_memory_sqlite(url: str) -> bool:
    return _is_sqlite(url) and (":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"))


def _enable_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def get_async_engine(database_url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine.

    In-memory SQLite uses a StaticPool so every session sees the same database.

    Args:
        database_url: SQLAlchemy async URL (uses settings if None)
        echo: Log SQL statements (uses settings if None)

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Usage:
        engine = get_async_engine("sqlite+aiosqlite:///./index.db")
    """
    store_config = get_settings().vector_store
    url = database_url or store_config.database_url
    echo_sql = store_config.echo_sql if echo is None else echo

    if _is_memory_sqlite(url):
        return create_async_engine(
            url,
            echo=echo_sql,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    engine = create_async_engine(url, echo=echo_sql, pool_pre_ping=True)
    if _is_sqlite(url):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_pragmas)
    return engine


def get_async_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """
    Create async session factory bound to an engine.

    Returns:
        async_sessionmaker: Factory with expire_on_commit disabled so rows
        stay readable after commit
    """
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )
