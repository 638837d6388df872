"""
Test fixtures for the Bank Demo API test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - client: Async HTTP test client (unauthenticated)
  - authenticated_client: Test client with a registered user and JWT
  - second_user_headers: Bearer headers for a second user (cross-user tests)
  - account_number: An account owned by the authenticated_client user
  - fund_account: Helper that deposits pounds into an account

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) for speed and isolation.
    Each test gets a completely fresh database.
  - FastAPI's get_db dependency is overridden to use the test engine, so
    the application code runs exactly as it does in production.
  - Users are created and logged in through the real /v1/users and
    /v1/auth endpoints.
"""

import os

# Settings are read at import time; give the app a signing key before import
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from app.database import Base, get_db
from app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


def user_payload(email: str, name: str = "Test User") -> dict:
    """A valid POST /v1/users body."""
    return {
        "name": name,
        "email": email,
        "phoneNumber": "+441234567890",
        "address": {
            "line1": "1 Main St",
            "town": "London",
            "county": "Greater London",
            "postcode": "E1 6AN",
        },
    }


async def register_and_login(client: AsyncClient, email: str, name: str = "Test User") -> tuple[str, str]:
    """Create a user through the API and return (user_id, token)."""
    created = await client.post("/v1/users", json=user_payload(email, name))
    assert created.status_code == 201, f"User creation failed: {created.text}"
    login = await client.post("/v1/auth", json={"email": email})
    assert login.status_code == 200, f"Login failed: {login.text}"
    return created.json()["id"], login.json()["token"]


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Provide an async session bound to the test engine."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """
    Async HTTP test client with the test database injected.

    This overrides the get_db dependency so all requests hit the
    in-memory test database instead of the real one.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def authenticated_client(client):
    """
    Test client with a registered user and JWT token.

    The user's id is available as client.user_id.
    """
    user_id, token = await register_and_login(client, "testuser@example.com")
    client.headers["Authorization"] = f"Bearer {token}"
    client.user_id = user_id
    return client


@pytest_asyncio.fixture
async def second_user_headers(authenticated_client) -> dict:
    """
    Authorization headers for a second user, for cross-user tests.

    Pass them per request (headers=...) to act as the second user; the
    client's default headers stay those of the first user.
    """
    _, token = await register_and_login(
        authenticated_client, "seconduser@example.com", "Second User"
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def account_number(authenticated_client) -> str:
    """A fresh zero-balance account owned by the authenticated user."""
    response = await authenticated_client.post(
        "/v1/accounts",
        json={"name": "Test Account", "accountType": "personal"},
    )
    assert response.status_code == 201, response.text
    return response.json()["accountNumber"]


@pytest.fixture
def fund_account(authenticated_client):
    """Return a coroutine function that deposits `pounds` into an account."""

    async def _fund(account_number: str, pounds: float) -> None:
        response = await authenticated_client.post(
            f"/v1/accounts/{account_number}/transactions",
            json={"amount": pounds, "currency": "GBP", "type": "deposit"},
        )
        assert response.status_code == 201, response.text

    return _fund


@pytest.fixture
def new_user_payload():
    """Return the user_payload() builder for tests that post their own users."""
    return user_payload


@pytest.fixture
def register_user(client):
    """Return a coroutine function that registers + logs in a user: (user_id, headers)."""

    async def _register(email: str, name: str = "Test User") -> tuple[str, dict]:
        user_id, token = await register_and_login(client, email, name)
        return user_id, {"Authorization": f"Bearer {token}"}

    return _register
