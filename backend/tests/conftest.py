"""
Menagerie Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (real SQLite store, API client,
       mocked gateway).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, created fresh for each test):
    settings ─► database ─┬─► gateway
                          └─► test_client
    mock_gateway: AsyncMock standing in for a TableGateway (no DB needed)

The store is a SQLite file under tmp_path, driven through aiosqlite, so every
test starts from an empty `animals` table and tests never share state.
"""

import os
import uuid
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any menagerie imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from menagerie.config import Settings  # noqa: E402
from menagerie.database import Base, Database  # noqa: E402
from menagerie.main import create_app  # noqa: E402
from menagerie.schemas.animal import AnimalRead  # noqa: E402
from menagerie.storage.animals import build_animal_gateway  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Store Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'menagerie.db'}",
        log_level="WARNING",
        db_statement_timeout=5.0,
        disconnect_poll_interval=0.05,
    )


@pytest_asyncio.fixture
async def database(settings):
    """
    A Database with the `animals` table created.

    The engine is built here rather than by Database itself: SQLite has no
    use for the PostgreSQL pool sizing, and Alembic's DDL is PostgreSQL-only,
    so the schema comes from the model metadata instead.
    """
    engine = create_async_engine(settings.database_url)
    db = Database(settings, engine=engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db
    await db.dispose()


@pytest.fixture
def gateway(database):
    return build_animal_gateway(database.engine, statement_timeout=5.0)


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(settings, database):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient configured to talk to a fresh app instance.
    How:     ASGITransport routes requests directly to the app. It does not
             run the lifespan, so the Database is injected into create_app().

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    app = create_app(settings, database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Mock Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_gateway():
    """
    An AsyncMock with the five gateway operations.

    Usage:
        async def test_get(mock_gateway):
            mock_gateway.get.return_value = None
            result = await ResourceController(mock_gateway, ...).get(str(uuid4()))
    """
    gw = AsyncMock()
    gw.create = AsyncMock()
    gw.list = AsyncMock(return_value=[])
    gw.get = AsyncMock(return_value=None)
    gw.update = AsyncMock(return_value=None)
    gw.delete = AsyncMock(return_value=None)
    return gw


@pytest.fixture
def sample_animal():
    """A stored animal as the gateway would return it."""
    return AnimalRead(id=uuid.uuid4(), name="Rex", weight=500, diet="carnivorous")
