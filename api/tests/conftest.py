"""
Shared test fixtures for the DevConnector API tests.

Provides database session management, test clients, and user fixtures.
"""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from devconnector.auth.api_key import generate_api_key, get_key_prefix
from devconnector.config import settings
from devconnector.database import Base, get_db, make_engine
from devconnector.main import app
from devconnector.middleware.rate_limit import reset_limiter

# Import models so they're registered with Base.metadata before table creation
from devconnector.models import APIKey, Post, Profile, User  # noqa: F401
from devconnector.routers.profile import get_repository_proxy
from devconnector.services.github import GitHubConfig, RepositoryProxy

# Test database URL (uses separate test database)
TEST_DATABASE_URL = settings.test_database_url

# Create test engine with NullPool to avoid connection issues
test_engine = make_engine(
    TEST_DATABASE_URL,
    poolclass=NullPool,
)

TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


# --- Rate Limiter Reset Fixture ---


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Reset rate limiter before each test to ensure test isolation."""
    reset_limiter()
    yield


# --- Database Fixtures ---


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create tables before each test function, drop after.
    Provides isolated database state per test.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client configured for testing.
    Overrides database dependency with test session.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True,
    ) as client:
        yield client

    app.dependency_overrides.clear()


# --- GitHub Fixtures ---


@pytest.fixture
def github_proxy() -> Callable[..., list[httpx.Request]]:
    """
    Factory fixture that routes the GitHub proxy through a fake transport.

    Call it with a handler taking an ``httpx.Request`` and returning an
    ``httpx.Response``; it returns the list the sent requests are recorded in.
    """

    def _install(handler: Callable[[httpx.Request], httpx.Response], token: str | None = "test-token"):
        sent: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return handler(request)

        config = GitHubConfig(token=token, api_url="https://github.test")
        proxy = RepositoryProxy(config, transport=httpx.MockTransport(_record))
        app.dependency_overrides[get_repository_proxy] = lambda: proxy
        return sent

    return _install


# --- Authentication Helper Fixtures ---


@pytest.fixture
def auth_headers():
    """Factory fixture for creating X-API-Key headers."""

    def _auth_headers(api_key: str) -> dict[str, str]:
        return {"X-API-Key": api_key}

    return _auth_headers


@pytest.fixture
def valid_profile_data() -> dict[str, Any]:
    """Valid profile payload."""
    return {
        "status": "Developer",
        "company": "Acme",
        "skills": "python, fastapi ,sql",
        "github_username": "octocat",
        "twitter": "https://twitter.com/octocat",
    }


@pytest.fixture
def valid_experience_data() -> dict[str, Any]:
    """Valid experience payload."""
    return {
        "title": "Backend Engineer",
        "company": "Acme",
        "location": "Berlin",
        "from": "2020-01-01",
        "to": "2022-06-30",
        "current": False,
        "description": "APIs",
    }


@pytest.fixture
def valid_education_data() -> dict[str, Any]:
    """Valid education payload."""
    return {
        "school": "TU Berlin",
        "degree": "MSc",
        "fieldofstudy": "Computer Science",
        "from": "2014-10-01",
        "to": "2017-09-30",
    }


# --- User Fixtures ---


async def _create_user(
    db_session: AsyncSession,
    name: str,
    email: str,
) -> dict[str, Any]:
    """Helper to create a user with an API key in the database."""
    user = User(
        name=name,
        email=email.lower(),
        avatar=f"https://avatars.test/{name.lower().replace(' ', '-')}.png",
    )
    db_session.add(user)
    await db_session.flush()

    plaintext_key, key_hash = generate_api_key()
    api_key = APIKey(
        user_id=user.id,
        key_hash=key_hash,
        key_prefix=get_key_prefix(plaintext_key),
        name="Test key",
    )
    db_session.add(api_key)

    await db_session.commit()

    return {
        "user_id": user.id,
        "name": user.name,
        "email": user.email,
        "avatar": user.avatar,
        "api_key": plaintext_key,
    }


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> dict[str, Any]:
    """
    Create a standard test user with an API key.

    Returns dict with user data and plaintext API key.
    """
    return await _create_user(db_session, name="Test User", email="test@example.com")


@pytest_asyncio.fixture
async def second_user(db_session: AsyncSession) -> dict[str, Any]:
    """Create a second user for testing ownership scenarios."""
    return await _create_user(db_session, name="Second User", email="second@example.com")
