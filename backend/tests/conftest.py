"""
Modulith Backend — Test Configuration (conftest.py)
====================================================

Shared pytest fixtures for the whole suite.

Fixture Hierarchy (all function-scoped):
    ├── test_settings: Settings with rate limiting off and a short timeout
    ├── database: in-memory SQLite Database with the tables created
    ├── empty_database: same, without tables (store failure paths)
    ├── app: create_app() wired to `database`
    ├── client: HTTPX AsyncClient talking to `app` over ASGITransport
    └── mock_db_session: AsyncMock standing in for an AsyncSession
"""

import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any modulith imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from modulith.config import Settings
from modulith.database import Base, Database
from modulith.main import create_app
from modulith.modules.tasks.models import Task  # noqa: F401

IN_MEMORY_URL = "sqlite+aiosqlite://"


def make_database(url: str = IN_MEMORY_URL) -> Database:
    """One connection shared by every session, so the in-memory store persists."""
    return Database(
        url,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url=IN_MEMORY_URL,
        environment="test",
        rate_limit_enabled=False,
        request_timeout=5,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """In-memory store with the schema created from the ORM metadata."""
    db = make_database()
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def empty_database() -> AsyncGenerator[Database, None]:
    """In-memory store without tables: every query fails with "no such table"."""
    db = make_database()
    yield db
    await db.dispose()

@pytest.fixture
def app(test_settings, database):
    return create_app(settings=test_settings, database=database)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for service and repository unit tests.

    Usage:
        mock_db_session.get.return_value = task
        result = await repository.find_by_id(mock_db_session, "abc")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session
