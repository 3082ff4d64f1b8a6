"""Async engine, request-scoped sessions and the declarative base for messaging tables."""

import logging
import os
from typing import Any, AsyncGenerator

from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

load_dotenv()

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by users, conversations, participants and messages."""


def get_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise ValueError("DATABASE_URL environment variable is required")
    return url


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, **kwargs: Any) -> AsyncEngine:
    """Create the async engine for ``url``.

    SQLite only enforces foreign keys when each connection switches them on,
    so a listener does that for SQLite URLs.
    """
    engine = create_async_engine(
        url, echo=os.getenv("SQL_DEBUG", "false").lower() == "true", **kwargs
    )
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


engine = build_engine(get_database_url())

AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; work a service did not commit is discarded on close."""
    async with AsyncSessionLocal() as session:
        yield session


async def init_db() -> None:
    """Create tables when running against a throwaway SQLite database.

    Real deployments are migrated with alembic.
    """
    if engine.dialect.name == "sqlite":
        logger.info("Creating tables on %s", engine.url.render_as_string())
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
