from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from custody import config
from custody.api.deps import get_notifier, get_object_store
from custody.config import Settings
from custody.db import build_engine, get_session
from custody.main import app
from custody.models import SQLModel
from custody.services.notification import InMemoryNotificationDispatcher
from custody.services.storage import InMemoryObjectStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Create a per-test SQLite database with every table in place.

    A file database (rather than ``:memory:``) lets independent sessions
    see each other's commits, which the concurrency tests rely on.
    """
    _engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Yield a session for seeding and inspecting rows directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier() -> InMemoryNotificationDispatcher:
    return InMemoryNotificationDispatcher()


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def settings_override() -> Iterator[Callable[..., Settings]]:
    """Replace the cached settings for the duration of a test."""
    original = config._settings

    def _apply(**overrides: Any) -> Settings:
        config._settings = Settings(**overrides)
        return config._settings

    yield _apply
    config._settings = original


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    notifier: InMemoryNotificationDispatcher,
    object_store: InMemoryObjectStore,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session and collaborators overridden.

    Each request gets its own session, as it would in production.
    """

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_object_store] = lambda: object_store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
