from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession

import repoquery.db as db
from repoquery.db.models import Base
from repoquery.db.providers import ConnectionProvider
from repoquery.db.repos.base import BaseRepository
from tests.models import User

SeedUsers = Callable[..., Awaitable[list[User]]]


@pytest.fixture
async def test_engine(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> AsyncIterator[AsyncEngine]:
    db_path = tmp_path / "test.db"
    engine = db.create_engine(f"sqlite+aiosqlite:///{db_path}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    monkeypatch.setattr(db, "SessionMaker", db.create_sessionmaker(engine))

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    _ = test_engine
    async with db.SessionMaker() as session:
        yield session


@pytest.fixture
async def connection(test_engine: AsyncEngine) -> AsyncIterator[AsyncConnection]:
    async with test_engine.connect() as conn:
        yield conn


@pytest.fixture
def users(connection: AsyncConnection) -> BaseRepository[User]:
    return BaseRepository(ConnectionProvider(connection), User)


@pytest.fixture
def seed_users(test_engine: AsyncEngine) -> SeedUsers:
    """Insert users with the given ages and commit; names are ``user-<age>``."""
    _ = test_engine
    base_time = datetime(2030, 1, 1, tzinfo=UTC)

    async def _seed(*ages: int) -> list[User]:
        rows = [
            User(
                name=f"user-{age}",
                age=age,
                creation_time=base_time + timedelta(minutes=i),
            )
            for i, age in enumerate(ages)
        ]
        async with db.SessionMaker() as session:
            session.add_all(rows)
            await session.commit()
        return rows

    return _seed
