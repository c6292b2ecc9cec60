"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from typing import Any

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import StaticPool

from setlist.config import settings
from setlist.database import build_engine, get_session, init_db, make_session_factory
from setlist.main import app
from setlist.models import Band, BandRole, User
from setlist.services import bands
from setlist.services.rate_limit import get_throttler
from setlist.services.sessions import SessionService


@pytest.fixture(autouse=True)
def reset_throttles():
    """Start every test with empty throttle windows."""
    get_throttler().reset()
    yield
    get_throttler().reset()


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database per test."""
    engine = build_engine(
        settings.database_url_test,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine):
    """Session factory bound to the test database."""
    return make_session_factory(test_engine)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    The database is discarded with the engine, so commits inside tests are
    real commits.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def user(session: AsyncSession) -> User:
    """Create a test user."""
    user = User(email="test@example.com")
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def other_user(session: AsyncSession) -> User:
    """Create a second test user."""
    user = User(email="other@example.com")
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def band(session: AsyncSession, user: User) -> Band:
    """Create a band owned by the test user."""
    band = await bands.create_band(session, "Test Band", "A band for tests", user.id)
    await session.commit()
    return band


@pytest.fixture
async def admin_user(session: AsyncSession, band: Band) -> User:
    """Create a user holding the admin role in the test band."""
    user = User(email="admin@example.com")
    session.add(user)
    await session.flush()
    await bands.add_member(session, band.id, user.id, BandRole.ADMIN)
    await session.commit()
    return user


@pytest.fixture
async def member_user(session: AsyncSession, band: Band) -> User:
    """Create a user holding the plain member role in the test band."""
    user = User(email="member@example.com")
    session.add(user)
    await session.flush()
    await bands.add_member(session, band.id, user.id, BandRole.MEMBER)
    await session.commit()
    return user


async def make_session_cookie(session: AsyncSession, user: User) -> dict[str, str]:
    """Mint a session for ``user`` and return a Cookie header carrying it."""
    token = await SessionService(session).create_session(user.id)
    await session.commit()
    return {"Cookie": f"{settings.session_cookie_name}={token}"}


@pytest.fixture
async def auth_headers(session: AsyncSession, user: User) -> dict[str, str]:
    """Session cookie headers for the test user."""
    return await make_session_cookie(session, user)


# Helper to make authenticated requests
class AuthenticatedClient:
    """Wrapper for AsyncClient with a session cookie."""

    def __init__(self, client: AsyncClient, headers: dict[str, str]):
        self.client = client
        self.headers = headers

    async def get(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.get(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.post(url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.delete(url, **kwargs)


@pytest.fixture
def authenticated_client(client: AsyncClient, auth_headers: dict[str, str]) -> AuthenticatedClient:
    """Create an authenticated test client for the band owner."""
    return AuthenticatedClient(client, auth_headers)


@pytest.fixture
async def admin_client(
    client: AsyncClient, session: AsyncSession, admin_user: User
) -> AuthenticatedClient:
    """Create an authenticated test client for the band admin."""
    return AuthenticatedClient(client, await make_session_cookie(session, admin_user))


@pytest.fixture
async def member_client(
    client: AsyncClient, session: AsyncSession, member_user: User
) -> AuthenticatedClient:
    """Create an authenticated test client for a plain band member."""
    return AuthenticatedClient(client, await make_session_cookie(session, member_user))
