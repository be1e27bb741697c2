"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
import tempfile
from pathlib import Path

# Minimal environment before indexer.config.settings is imported
_TEST_DB_DIR = tempfile.mkdtemp(prefix="zeko-indexer-tests-")
os.environ.setdefault(
    "DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_DB_DIR}/default.db"
)
os.environ.setdefault("START_MODE", "latest")
os.environ.setdefault("BACKFILL_ACK", "false")
os.environ.setdefault("INGEST_ENABLED", "true")
os.environ.setdefault("DEFAULT_SEQUENCER_URL", "https://sequencer.test/graphql")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("AUTO_CREATE_SCHEMA", "false")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from indexer.config.database import create_session_maker, init_models
from indexer.models.tracked_account import TrackedAccount
from tests.factories import PUBLIC_KEY, SEQUENCER_URL, FakeArchiveSource


@pytest.fixture
def fake_source():
    """Fake archive source with no accounts."""
    return FakeArchiveSource()


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Fresh SQLite database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/indexer.db")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    """Session factory bound to the per-test database."""
    return create_session_maker(db_engine)


@pytest_asyncio.fixture
async def session(session_maker):
    """Database session on the per-test database."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_account(session):
    """Factory creating tracked accounts directly."""

    async def _make(
        public_key: str = PUBLIC_KEY,
        token_id: str | None = None,
        backfill: bool = False,
        initialized: bool = False,
        cursor_height: int | None = None,
        enabled: bool = True,
    ) -> TrackedAccount:
        account = TrackedAccount(
            public_key=public_key,
            token_id=token_id,
            sequencer_url=SEQUENCER_URL,
            backfill=backfill,
            enabled=enabled,
            initialized=initialized,
            cursor_height=cursor_height,
            error_count=0,
        )
        session.add(account)
        await session.commit()
        return account

    return _make


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.refresh = AsyncMock()
    return session
