"""
Pytest fixtures for test database, client, and authentication.

Every test gets its own in-memory SQLite database (aiosqlite), so tests are
isolated without a running PostgreSQL. Redis is disabled; the cache layer
falls back to the database.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_ENABLED", "false")

from datetime import date, datetime, timedelta, timezone  # noqa: E402
from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from space_reservations.core.security import create_access_token, hash_password  # noqa: E402
from space_reservations.db.base import Base  # noqa: E402
from space_reservations.db.session import get_db  # noqa: E402
from space_reservations.main import app  # noqa: E402
from space_reservations.models.space import Space  # noqa: E402
from space_reservations.models.user import User  # noqa: E402

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _engine_options(url: str) -> dict:
    # One shared connection keeps an in-memory SQLite database alive across sessions
    if url.startswith("sqlite"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {}


def upcoming_monday(weeks_ahead: int = 2) -> date:
    """A Monday safely in the future, so past-date checks never interfere."""
    today = datetime.now(timezone.utc).date()
    return today + timedelta(days=7 - today.weekday() + 7 * (weeks_ahead - 1))


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


def reservation_payload(space_id: int, day: date, start_hour: int, end_hour: int) -> dict:
    return {
        "space_id": space_id,
        "reservation_date": day.isoformat(),
        "start_time": at(day, start_hour).isoformat(),
        "end_time": at(day, end_hour).isoformat(),
    }


@pytest.fixture
def monday() -> date:
    return upcoming_monday()


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh database per test: create tables, yield session, dispose engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **_engine_options(TEST_DATABASE_URL))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    user = User(
        email="test@example.com",
        name="Test User",
        hashed_password=hash_password("testpassword123"),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    token = create_access_token(data={"sub": str(test_user.id), "email": test_user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_user_headers() -> dict:
    """Valid token for a second user who owns nothing."""
    token = create_access_token(data={"sub": "999", "email": "other@example.com"})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def space_id(db_session: AsyncSession) -> int:
    # Only the id is handed out: a rejected request rolls the shared session
    # back and expires loaded instances.
    space = Space(
        name="Meeting Room A",
        location="Floor 1",
        capacity=10,
        description="Projector and whiteboard",
    )
    db_session.add(space)
    await db_session.commit()
    await db_session.refresh(space)
    return space.id
