"""Async SQLAlchemy engine and session factory.

Uses psycopg3, which serves both the async application engine and Alembic's
sync migration engine from the same ``postgresql+psycopg://`` URL.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def create_engine(database_url: str, *, pool_size: int = 5, max_overflow: int = 10, **kwargs: object) -> AsyncEngine:
    """Create the process-wide async engine.

    ``pool_pre_ping`` survives PostgreSQL restarts and idle disconnects;
    ``pool_recycle`` drops connections older than an hour so that proxies
    with idle timeouts never hand back a dead socket.  Extra *kwargs* are
    passed through to ``create_async_engine``.
    """
    options: dict[str, object] = {
        "echo": False,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }
    options.update(kwargs)
    return create_async_engine(database_url, **options)  # type: ignore[arg-type]


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the per-request session factory.

    ``expire_on_commit=False`` keeps ORM instances readable after commit
    without implicit IO.  Handlers that need the committed state re-read it
    explicitly (see ``managers.worker_models.read_authoritative``).
    """
    return async_sessionmaker(engine, expire_on_commit=False)
