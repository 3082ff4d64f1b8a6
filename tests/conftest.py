import os

# Tests always run against in-memory SQLite, whatever .env says
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from typing import Any, AsyncGenerator, Callable, Dict, Generator  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import marketplace_messaging.models.db  # noqa: E402, F401
from marketplace_messaging.database import Base, build_engine, get_db  # noqa: E402
from marketplace_messaging.main import app  # noqa: E402
from marketplace_messaging.models.db.user_model import UserModel  # noqa: E402


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test, shared by every session of the test.

    Foreign keys are enforced, as they are on Postgres.
    """
    engine = build_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Database session for integration tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def make_user(test_db: AsyncSession) -> Callable[..., Any]:
    """Factory inserting users, standing in for the identity provider's table."""

    async def _make_user(first_name: str, last_name: str = "Tester") -> UserModel:
        user = UserModel(
            email=f"{first_name.lower()}.{last_name.lower()}@example.com",
            first_name=first_name,
            last_name=last_name,
            avatar=f"https://cdn.example.com/avatars/{first_name.lower()}.png",
        )
        test_db.add(user)
        await test_db.commit()
        return user

    return _make_user


@pytest.fixture
async def alice(make_user: Callable[..., Any]) -> UserModel:
    return await make_user("Alice", "Client")


@pytest.fixture
async def bob(make_user: Callable[..., Any]) -> UserModel:
    return await make_user("Bob", "Provider")


@pytest.fixture
async def carol(make_user: Callable[..., Any]) -> UserModel:
    return await make_user("Carol", "Outsider")


@pytest.fixture
def headers_for() -> Callable[[UserModel], Dict[str, str]]:
    """Request headers identifying a user as the viewer."""

    def _headers_for(user: UserModel) -> Dict[str, str]:
        return {"X-User-Id": str(user.id)}

    return _headers_for


@pytest.fixture
async def http_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client running the app in the test's event loop against the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def mock_db() -> AsyncGenerator[AsyncMock, None]:
    """Create a mock database session for unit tests."""
    mock_session = AsyncMock()
    mock_session.commit = AsyncMock()
    mock_session.rollback = AsyncMock()
    mock_session.close = AsyncMock()
    mock_session.refresh = AsyncMock()
    mock_session.execute = AsyncMock()
    mock_session.add = MagicMock()  # add is sync, not async

    yield mock_session


@pytest.fixture
def client() -> Generator[TestClient, Any, None]:
    """Create a test client for the FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client
