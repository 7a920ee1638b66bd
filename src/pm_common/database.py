"""Async PostgreSQL engine and per-request sessions.

Wallet debits, position writes and outcome ledger updates for a single wager all
run on one AsyncSession so they commit or roll back together.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """ORM base. Only the users table is mapped; the ledgers use raw text() SQL."""


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def check_database() -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("database reachable")


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency. The service that uses the session commits or rolls back."""
    async with async_session_factory() as session:
        yield session
