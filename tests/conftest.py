"""
Pytest configuration and core fixtures.

Provides an in-memory Redis server (fakeredis) with a controllable clock, an
in-memory SQLite database and an HTTP client bound to the FastAPI app.
Everything is function-scoped for complete test isolation.
"""

import os
import tempfile
import time
from typing import Any, AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import fakeredis
import pytest
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

INTERNAL_API_SECRET = "test_internal_secret"


def pytest_configure(config):
    """Configure the environment before any application module is imported."""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["DEBUG"] = "false"
    os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
    os.environ["REDIS_URL"] = ""
    os.environ["REDIS_TOKEN"] = ""
    os.environ["INTERNAL_API_SECRET"] = INTERNAL_API_SECRET
    os.environ["SENTRY_DSN"] = ""
    os.environ["LOG_DIR"] = os.path.join(tempfile.gettempdir(), "mocah-test-logs")
    for flag in ("AI_V2_ENABLED", "AI_V2_ROLLOUT_PERCENTAGE", "AI_V2_FALLBACK_ON_ERROR"):
        os.environ.pop(flag, None)


# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------


class FakeClock:
    """Stand-in for ``time.time`` that only moves when a test advances it."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    """Freeze the wall clock fakeredis computes key expiry from."""
    fake_clock = FakeClock()
    monkeypatch.setattr(time, "time", fake_clock)
    return fake_clock


@pytest.fixture(autouse=True)
def reset_redis_service():
    """Start every test with no Redis client, and drop any client afterwards."""
    from mocah.core.services.redis_service import RedisService

    RedisService._reset()
    yield
    RedisService._reset()


@pytest.fixture
def redis_server() -> fakeredis.FakeServer:
    """Fresh in-memory Redis server per test."""
    return fakeredis.FakeServer()


@pytest.fixture
def redis_store(redis_server: fakeredis.FakeServer, clock: FakeClock) -> fakeredis.FakeRedis:
    """Synchronous client on the test server for seeding and inspecting keys."""
    return fakeredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
async def fake_redis(
    redis_server: fakeredis.FakeServer, clock: FakeClock
) -> fakeredis.FakeAsyncRedis:
    """In-memory async client installed through RedisService.init."""
    from mocah.core.services.redis_service import RedisService

    redis_client = fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True)
    await RedisService.init(client=redis_client)
    return redis_client


@pytest.fixture
async def failing_redis() -> AsyncMock:
    """A client whose commands and pipelines all raise (simulated outage)."""
    from mocah.core.services.redis_service import RedisService

    error = RedisConnectionError("Connection refused")

    pipeline = MagicMock()
    pipeline.__aenter__.return_value = pipeline
    pipeline.__aexit__.return_value = False
    pipeline.execute = AsyncMock(side_effect=error)

    redis_client = AsyncMock()
    for command in ("get", "set", "delete", "hgetall", "ping"):
        getattr(redis_client, command).side_effect = error
    redis_client.pipeline = MagicMock(return_value=pipeline)

    await RedisService.init(client=redis_client)
    return redis_client


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory bound to a fresh in-memory SQLite schema."""
    from mocah.core.db import Base
    import mocah.core.db.models  # noqa: F401  (registers tables)

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield async_sessionmaker(bind=engine, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def app():
    """Create FastAPI application for testing."""
    from mocah.main import app as fastapi_app

    return fastapi_app


@pytest.fixture
async def client(
    app, session_factory: async_sessionmaker[AsyncSession]
) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client with the database session overridden."""
    from mocah.core.dependencies import get_async_session

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_session

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_async_session, None)


@pytest.fixture
def internal_headers() -> dict[str, str]:
    return {"X-Internal-API-Key": INTERNAL_API_SECRET}


@pytest.fixture
def caller_headers(internal_headers: dict[str, str]) -> dict[str, str]:
    return {
        **internal_headers,
        "X-User-Id": "user_1",
        "X-Organization-Id": "org_1",
    }


@pytest.fixture
def seed(session_factory: async_sessionmaker[AsyncSession]):
    """Persist ORM objects in their own committed transaction."""

    async def _seed(*objects: Any) -> None:
        async with session_factory() as session:
            session.add_all(objects)
            await session.commit()

    return _seed
