"""
Glyphbin Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (mocked sessions, a throwaway
       SQLite database, the highlighter, an API client).

Fixture Hierarchy:
    Session-scoped (created once for all tests):
    └── highlighter: the real Pygments catalog (building it loads every style)

    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock AsyncSession (no real DB needed)
    ├── db_engine / db_session_factory: SQLite file in tmp_path via aiosqlite
    ├── paste_service: PasteService over the real highlighter and store
    ├── sample_paste_data: Field values for a stored Paste
    └── test_client: HTTPX AsyncClient with dependency overrides
"""

import os
import tempfile
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any glyphbin imports
_test_dir = tempfile.mkdtemp(prefix="glyphbin_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir}/test.db"
os.environ["HIGHLIGHT_THEME"] = "monokai"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from glyphbin.database import Base, get_db_session
from glyphbin.dependencies import get_highlighter, get_paste_service
from glyphbin.models.paste import Paste  # noqa: F401  (registers the table)
from glyphbin.services.highlighter import Highlighter
from glyphbin.services.identifiers import new_id, new_token
from glyphbin.services.paste_service import PasteService


# ══════════════════════════════════════════════════════════════════════════
# Session-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def highlighter():
    """The real catalog. Read-only, so sharing it across tests is safe."""
    return Highlighter("monokai")


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = paste
            result = await paste_store.get(mock_db_session, paste_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A fresh SQLite database file with the schema created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'pastes.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine):
    """Session factory configured like glyphbin.database.async_session_factory."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def paste_service(highlighter):
    return PasteService(highlighter, max_paste_size=64 * 1024)


@pytest.fixture
def sample_paste_data():
    """Field values for a Paste row, as PasteService.submit would build them."""
    return {
        "id": new_id().bytes,
        "owner_id": None,
        "created_at": datetime.now(timezone.utc),
        "expires_at": None,
        "language": "Python",
        "content": b"print('hi')\n",
        "rendered": '<pre class="contents" style="background-color:#272822"></pre>',
        "deletion_token": new_token().bytes,
    }


@pytest_asyncio.fixture
async def test_client(highlighter, paste_service, db_session_factory):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    ASGITransport does not run the lifespan, so the objects the lifespan
    would publish on app.state are supplied as dependency overrides, and
    the request session comes from the temporary SQLite database.
    """
    from glyphbin.main import app

    async def override_db_session():
        async with db_session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_paste_service] = lambda: paste_service
    app.dependency_overrides[get_highlighter] = lambda: highlighter

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
