from __future__ import annotations

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from repoquery.db import session as _session
from repoquery.db.providers import ConnectionProvider, DatabaseProvider, SessionProvider

create_engine = _session.create_engine
create_sessionmaker = _session.create_sessionmaker
engine = _session.engine

# NOTE: keep SessionMaker at the package level so tests can monkeypatch
# `repoquery.db.SessionMaker` and have `get_session()` pick it up.
SessionMaker: async_sessionmaker[AsyncSession] = _session.SessionMaker


async def get_session() -> AsyncIterator[AsyncSession]:
    async with SessionMaker() as session:
        yield session


__all__ = [
    "ConnectionProvider",
    "DatabaseProvider",
    "SessionMaker",
    "SessionProvider",
    "create_engine",
    "create_sessionmaker",
    "engine",
    "get_session",
]
