"""
Process-wide engine and session factory for the DocuVault server.

Routes receive a request-scoped session through ``get_session``; background
work (notification fan-out) opens its own sessions from ``async_session_maker``.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from docuvault.core.logging_config import get_logger
from docuvault.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)

engine = create_engine(settings.database_url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """Prepare the schema at startup.

    A SQLite database is built from the ORM metadata; Postgres is expected to
    have been upgraded with ``alembic upgrade head`` already.
    """
    if engine.dialect.name != "sqlite":
        logger.info(f"Schema for {engine.dialect.name} is managed by Alembic")
        return
    await create_all(engine)
    logger.info("SQLite schema created from ORM metadata")
