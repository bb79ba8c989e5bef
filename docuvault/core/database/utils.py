"""
Engine and session helpers shared by the server, the CLI and the tests.

DocuVault runs on Postgres (asyncpg) in production and on SQLite (aiosqlite)
for development and tests. Notification fan-out writes through its own
session while the request session is still open, so SQLite connections wait
for the write lock instead of failing immediately.
"""

from __future__ import annotations

import re

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .base import Base

SQLITE_LOCK_TIMEOUT_SECONDS = 30


def normalize_database_url(db_url: str) -> str:
    """Rewrite ``postgres://`` style URLs to the asyncpg driver.

    Other URLs (``sqlite+aiosqlite://`` in development and tests) pass through.
    """
    return re.sub(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://", "postgresql+asyncpg://", db_url, count=1)


def is_sqlite_url(db_url: str) -> bool:
    return db_url.startswith("sqlite")


def create_engine(db_url: str) -> AsyncEngine:
    """Create the async engine for a DocuVault database.

    Args:
        db_url: Database URL; Postgres URLs may use any driver suffix

    Returns:
        AsyncEngine bound to asyncpg or aiosqlite
    """
    url = normalize_database_url(db_url)
    if is_sqlite_url(url):
        return create_async_engine(url, connect_args={"timeout": SQLITE_LOCK_TIMEOUT_SECONDS})
    return create_async_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory whose objects stay readable after commit.

    Services commit and then hand the same entities to the response models
    and the notification dispatcher.
    """
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create every DocuVault table from the ORM metadata.

    Used for SQLite development databases, the seed command and tests;
    Postgres schemas are managed by Alembic.
    """
    from . import entities  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
