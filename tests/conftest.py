"""
PasteShare — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment overrides are applied before the application package is
       imported; each test gets a fresh in-memory SQLite database.

Fixture Hierarchy (all function-scoped):
    ├── engine / session_factory / db_session: in-memory aiosqlite database
    ├── allocator / store / resolver / paginator / service: core components
    ├── new_paste / add_paste: build unsaved pastes, or insert them via the store
    ├── mock_db_session: AsyncMock session for failure-path tests
    └── test_client: HTTPX AsyncClient wired to the app and the test database
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["AUTO_CREATE_SCHEMA"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "1000"
os.environ["EXTERNAL_HOST"] = "paste.test"

from datetime import datetime, timezone
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pasteshare.database import Base, get_db_session
from pasteshare.models.paste import UNASSIGNED_ID, Paste
from pasteshare.services.allocator import IdentifierAllocator
from pasteshare.services.diff_engine import DiffEngine
from pasteshare.services.paginator import Paginator
from pasteshare.services.paste_service import PasteService
from pasteshare.services.paste_store import PasteStore
from pasteshare.services.thread_resolver import ThreadResolver


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    """
    A private in-memory SQLite database with the pastes table created.

    StaticPool keeps the single connection alive so every session in the
    test sees the same database.
    """
    test_engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Core Component Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def allocator():
    return IdentifierAllocator()


@pytest.fixture
def store(allocator):
    return PasteStore(allocator, allocation_attempts=3)


@pytest.fixture
def resolver():
    return ThreadResolver()


@pytest.fixture
def paginator(store, resolver):
    return Paginator(store, resolver)


@pytest.fixture
def service(store, resolver, paginator):
    return PasteService(
        store=store,
        resolver=resolver,
        paginator=paginator,
        differ=DiffEngine(),
        page_window=2,
        base_url="http://paste.test",
    )


def build_paste(
    content: str = "print('hello')",
    private: bool = False,
    annotates: Optional[int] = None,
    paste_id: int = UNASSIGNED_ID,
    **fields,
) -> Paste:
    """An unsaved Paste, as the submission step would build it."""
    return Paste(
        id=paste_id,
        content=content,
        private=private,
        annotates=annotates,
        created=datetime.now(timezone.utc),
        **fields,
    )


@pytest.fixture
def new_paste():
    return build_paste


@pytest.fixture
def add_paste(db_session, store):
    """
    Insert a paste through the store and return it.

    Usage:
        root = await add_paste(author="alice")
        reply = await add_paste(annotates=root.id)
    """
    async def _add(**kwargs) -> Paste:
        paste = build_paste(**kwargs)
        await store.insert(db_session, paste)
        return paste

    return _add


# ══════════════════════════════════════════════════════════════════════════
# Mocks and HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock async database session for failure-path tests.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    The request-scoped session dependency is pointed at the test database.
    """
    from pasteshare.main import app

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
