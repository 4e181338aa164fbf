"""
PostgreSQL engine, session factory and declarative base.

One async engine per process. Request handlers get a session from
footballer_api.dependencies.get_db; scripts and the CLI use
async_session_factory directly.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from footballer_api.config import settings

logger = logging.getLogger(__name__)


engine = create_async_engine(
    settings.async_database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_timeout=settings.db_pool_timeout,
)

# Rows are read into detached Footballer objects; nothing relies on
# the unit of work, so neither expiry nor autoflush is wanted.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


async def check_database_connection() -> None:
    """Raise if PostgreSQL cannot be reached with the configured URL."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise
