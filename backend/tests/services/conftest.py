"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh SQLite database file under tmp_path
    - get_db and get_session_factory dependencies overridden to use the test DB
    - db_manager patched for code that reaches the singleton directly

Design Decisions:
    - File-backed SQLite rather than :memory:: the stats aggregator opens one
      session per concurrent count, and every connection must see the same data
    - seed_users inserts the identity rows that the upstream auth layer
      would normally own
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from twincord.db.base import Base
from twincord.infrastructure.database import (
    get_db, get_session_factory, DatabaseSessionManager,
)
from twincord.models.user import User
import twincord.models  # noqa: F401
import twincord.infrastructure.database as db_module
from twincord.main import app


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'twincord-test.db'}", echo=False,
    )
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
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: test_session_factory

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager.listen_engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def seed_users(test_db):
    """Three users, one online: u1 (online), u2, u3."""
    users = [
        User(id="u1", name="Ada", email="ada@example.com", is_online=True),
        User(id="u2", name="Grace", email="grace@example.com"),
        User(id="u3", name="Linus", email="linus@example.com"),
    ]
    test_db.add_all(users)
    await test_db.commit()
    return {u.id: u for u in users}
