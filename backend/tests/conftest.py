"""
Test Configuration

This module contains shared fixtures and configuration for tests.
Every test runs against a fresh in-memory SQLite database.
"""

import os

# Settings are read at import time, so the environment is prepared first
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("DB_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DB_CREATE_TABLES", "false")
os.environ.setdefault("AUTH_JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTH_ADMIN_EMAILS", '["admin@zyrotech.io"]')
os.environ.setdefault("AUTH_ARGON2_TIME_COST", "1")
os.environ.setdefault("AUTH_ARGON2_MEMORY_COST", "8")
os.environ.setdefault("AUTH_ARGON2_PARALLELISM", "1")
os.environ.setdefault("LOG_JSON_LOGS", "false")
os.environ.setdefault("GOOGLE_CLIENT_IDS", '["test-client-id"]')

from typing import AsyncGenerator, Callable, Dict, List, Tuple  # noqa: E402
from unittest.mock import AsyncMock, patch  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import zyrotech.models  # noqa: E402,F401
from zyrotech.auth.hashing import hash_password  # noqa: E402
from zyrotech.auth.jwt import create_access_token  # noqa: E402
from zyrotech.db.base import Base  # noqa: E402
from zyrotech.db.session import get_db  # noqa: E402
from zyrotech.mailer.service import get_email_service  # noqa: E402
from zyrotech.main import app  # noqa: E402
from zyrotech.models.user import User  # noqa: E402

TEST_PASSWORD = "Str0ngPassw0rd!"


class FakeEmailService:
    """Captures outgoing mail instead of talking to SMTP."""

    def __init__(self):
        self.otps: List[Tuple[str, str]] = []
        self.resets: List[Tuple[str, str]] = []

    async def send_verification_otp(self, to_email: str, full_name: str, code: str) -> None:
        self.otps.append((to_email, code))

    async def send_password_reset(self, to_email: str, full_name: str, reset_url: str) -> None:
        self.resets.append((to_email, reset_url))


@pytest.fixture
async def test_engine():
    """Create a fresh in-memory database with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and unit-testing services."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def outbox() -> FakeEmailService:
    return FakeEmailService()


@pytest.fixture
async def client(session_factory, outbox) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with test database and captured email."""
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: outbox

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def create_user(session_factory) -> Callable:
    """Factory inserting a user directly in the database."""
    async def _create_user(
        email: str = "trader@zyrotech.io",
        password: str = TEST_PASSWORD,
        full_name: str = "Test Trader",
        **fields
    ) -> User:
        fields.setdefault("is_email_verified", True)
        fields.setdefault("password_hash", hash_password(password) if password else None)
        async with session_factory() as session:
            user = User(
                email=email,
                full_name=full_name,
                **fields
            )
            session.add(user)
            await session.commit()
            return user

    return _create_user


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
async def test_user(create_user) -> User:
    """Verified user with a password."""
    return await create_user()


@pytest.fixture
def user_headers(test_user) -> Dict[str, str]:
    return auth_headers(test_user)


@pytest.fixture
async def admin_user(create_user) -> User:
    return await create_user(email="admin@zyrotech.io", full_name="Admin User")


@pytest.fixture
def admin_headers(admin_user) -> Dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture
def mock_google():
    """Patch Google token verification; set ``return_value`` to the token payload."""
    with patch(
        "zyrotech.services.auth_service.verify_google_id_token",
        new_callable=AsyncMock
    ) as mock:
        yield mock


@pytest.fixture
async def group(client, user_headers) -> dict:
    response = await client.post("/api/groups", json={"name": "Commodities"}, headers=user_headers)
    return response.json()["data"]


@pytest.fixture
async def bot(client, user_headers, group) -> dict:
    response = await client.post(
        "/api/bots",
        json={
            "name": "XAU/USD",
            "description": "Gold against the dollar",
            "recommendedCapital": 100,
            "groupId": group["id"],
        },
        headers=user_headers
    )
    return response.json()["data"]
