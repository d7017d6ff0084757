"""
Trophy API - Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (settings, database, API client).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, fresh for each test):
    ├── test_settings:    Settings pointing at a SQLite file in tmp_path
    ├── settings_factory: Same, with per-test overrides (limits, origins)
    ├── database:         Connected Database handle (tables created)
    ├── trophy_store:     TrophyStore bound to that database
    ├── trophy_app:       FastAPI app built by create_app(test_settings, database)
    ├── test_client:      HTTPX AsyncClient talking to trophy_app
    └── mock_db_session:  AsyncMock session for failure-path tests
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
# Why: The module-level app in app.main is built from the environment
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from app.config import Settings  # noqa: E402
from app.database import Database  # noqa: E402
from app.main import create_app  # noqa: E402
from app.services.trophy_store import TrophyStore  # noqa: E402

ALLOWED_ORIGIN = "http://localhost:5173"

# Smallest valid PNG (1x1 transparent pixel) as a data URL
SAMPLE_IMAGE = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


def make_settings(tmp_path, **overrides) -> Settings:
    """Settings isolated from the developer's .env and environment defaults."""
    values = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'trophies.db'}",
        "cors_origins": f"{ALLOWED_ORIGIN},https://trophies.example",
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def test_settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def settings_factory(tmp_path):
    """Build Settings on the same SQLite file with some fields overridden."""
    def factory(**overrides) -> Settings:
        return make_settings(tmp_path, **overrides)
    return factory


@pytest_asyncio.fixture
async def database(test_settings):
    """
    A connected Database on a throwaway SQLite file.

    Why a real database: ordering, deletes and id generation are the store's
    whole job; a mock would only test the mock.
    """
    async with Database.from_settings(test_settings) as db:
        yield db


@pytest_asyncio.fixture
async def trophy_store(database):
    return TrophyStore(database)


@pytest.fixture
def trophy_app(test_settings, database):
    return create_app(settings=test_settings, database=database)


@pytest_asyncio.fixture
async def test_client(trophy_app):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    ASGITransport does not run the lifespan; the `database` fixture has
    already connected the handle the app uses.
    """
    transport = ASGITransport(app=trophy_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_trophy_body():
    return {
        "name": "Regional Champion",
        "description": "First place, 2024 season",
        "imageUrl": SAMPLE_IMAGE,
    }


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.delete = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session
