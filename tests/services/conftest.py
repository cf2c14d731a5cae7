"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database with foreign keys enforced
    - get_db dependency overridden to use the test DB session
    - Every client gets its own app (fresh rate admission counters)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for service and
      route tests (ADR: Postgres-only SQLSTATE paths covered by unit tests)
    - app.state.db_manager set per app: readiness reads the manager from the app
    - raise_app_exceptions=False: the catch-all handler responds with 500 and
      Starlette then re-raises; tests assert on the response
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from filmvault.config import Settings
from filmvault.db.base import Base
from filmvault.infrastructure.database import (
    DatabaseSessionManager, enable_sqlite_foreign_keys, get_db,
)
from filmvault.main import create_app
from filmvault.models.account import Account
from filmvault.models.item import Item


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def test_settings():
    """Settings for route tests. Override fields per test via model_copy."""
    return Settings(
        environment="test",
        database_url="sqlite+aiosqlite:///:memory:",
        log_format="text",
    )


@pytest.fixture
def make_client(test_engine, test_session_factory):
    """Factory building a test client around an app created with given settings."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory

    def _make(settings: Settings) -> AsyncClient:
        app = create_app(settings)
        app.state.db_manager = fake_manager
        app.dependency_overrides[get_db] = override_get_db
        c = AsyncClient(
            transport=ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://test",
        )
        return c

    return _make


@pytest.fixture
async def client(make_client, test_settings):
    """FastAPI test client with DB dependency overridden."""
    async with make_client(test_settings) as c:
        yield c


@pytest.fixture
async def seed_account(test_db):
    """Insert one account directly into the test DB."""
    account = Account(id="acct-1", email="ada@example.com", name="Ada")
    test_db.add(account)
    await test_db.commit()
    await test_db.refresh(account)
    return account


@pytest.fixture
async def seed_item(test_db):
    """Insert one item directly into the test DB."""
    item = Item(
        title="Metropolis",
        description="Silent science-fiction classic",
        price=1299,
        content_url="https://cdn.example.com/metropolis.mp4",
        registrant_id="acct-1",
    )
    test_db.add(item)
    await test_db.commit()
    await test_db.refresh(item)
    return item
