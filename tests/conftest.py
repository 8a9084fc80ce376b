"""Test fixtures — a fresh in-memory database and app per test.

Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own in-memory SQLite engine (aiosqlite) with the
   schema created from Base.metadata, so nothing leaks between tests.
2. The app is built with create_app(app_settings): a fixed JWT secret
   and the minimum bcrypt cost so registering users stays fast.
3. get_db is overridden to hand every request the test's session.

Auth is NOT mocked: tests register real users and send real Bearer
tokens, since per-user isolation is the thing under test.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from plant_tracker.config import Settings
from plant_tracker.db.engine import get_db
from plant_tracker.db.models import Base
from plant_tracker.main import create_app

TEST_DB_URL = "sqlite+aiosqlite://"

PASSWORD = "password_123"


@pytest.fixture()
def app_settings() -> Settings:
    return Settings(
        database_url=TEST_DB_URL,
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        environment="test",
    )


@pytest.fixture()
def app(app_settings):
    return create_app(app_settings)


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session on a throwaway in-memory database.

    StaticPool keeps a single connection so the in-memory database
    survives across the session's commits.
    """
    engine = create_async_engine(TEST_DB_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = AsyncSession(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest_asyncio.fixture()
async def client(app, db_session):
    """HTTP client with the app's get_db overridden for testing."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def register(client, email: str | None = None, username: str | None = None) -> dict:
    """Register a user through the API and return auth headers + details."""
    suffix = uuid.uuid4().hex[:8]
    email = email or f"user-{suffix}@example.com"
    username = username or f"user{suffix}"
    r = await client.post(
        "/api/auth/register",
        json={"email": email, "username": username, "password": PASSWORD},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    return {
        "email": email,
        "user_id": body["userId"],
        "headers": {"Authorization": f"Bearer {body['jwt']}"},
    }


@pytest_asyncio.fixture()
async def alice(client):
    return await register(client, email="alice@example.com", username="alice")


@pytest_asyncio.fixture()
async def bob(client):
    return await register(client, email="bob@example.com", username="bob")
