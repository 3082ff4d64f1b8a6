from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import inspect, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from marketplace_messaging.database import get_database_url
from marketplace_messaging.models.db.participant_model import ParticipantModel
from marketplace_messaging.models.db.user_model import UserModel


@pytest.mark.asyncio
async def test_database_connection(test_db: AsyncSession) -> None:
    """Test that we can connect to the database."""
    result = await test_db.execute(text("SELECT 1"))
    assert result.scalar() == 1


@pytest.mark.asyncio
async def test_database_tables_exist(test_engine: AsyncEngine) -> None:
    """Test that required tables exist."""
    async with test_engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    assert {"users", "conversations", "conversation_participants", "messages"} <= set(
        tables
    )


@pytest.mark.asyncio
async def test_timestamps_read_back_as_utc(test_db: AsyncSession) -> None:
    """Offsets are normalised to UTC and tzinfo survives a round trip through SQLite."""
    local = datetime(2026, 5, 4, 15, 30, tzinfo=timezone(timedelta(hours=2)))
    user = UserModel(
        email="tz@example.com", first_name="Tz", last_name="Check", created_at=local
    )
    test_db.add(user)
    await test_db.commit()

    result = await test_db.execute(
        select(UserModel.created_at).where(UserModel.id == user.id)
    )
    stored = result.scalar_one()

    assert stored.tzinfo is not None
    assert stored == local
    assert stored.utcoffset() == timedelta(0)


@pytest.mark.asyncio
async def test_sqlite_enforces_foreign_keys(test_db: AsyncSession) -> None:
    """A participant row pointing at no conversation or user is refused."""
    test_db.add(ParticipantModel(conversation_id=uuid4(), user_id=uuid4()))

    with pytest.raises(IntegrityError):
        await test_db.flush()


def test_database_url_is_required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)

    with pytest.raises(ValueError, match="DATABASE_URL"):
        get_database_url()


def test_database_url_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://app@db/messaging")
    assert get_database_url() == "postgresql+asyncpg://app@db/messaging"
