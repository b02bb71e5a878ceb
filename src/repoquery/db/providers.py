"""Database providers hand the adapter a borrowed connection.

A provider never opens, commits or closes anything on its own; whoever created
the connection or session (the caller's unit of work) owns its lifetime.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession, AsyncTransaction


@runtime_checkable
class DatabaseProvider(Protocol):
    async def get_connection(self) -> AsyncConnection: ...

    def get_transaction(self) -> AsyncTransaction | None: ...


class ConnectionProvider:
    def __init__(self, connection: AsyncConnection) -> None:
        self.connection = connection

    async def get_connection(self) -> AsyncConnection:
        return self.connection

    def get_transaction(self) -> AsyncTransaction | None:
        return self.connection.get_transaction()


class SessionProvider:
    """Borrow the connection an ``AsyncSession`` is bound to.

    ``AsyncSession.connection()`` begins the session transaction if none is
    active, so statements run by the adapter join whatever the session later
    commits or rolls back.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._connection: AsyncConnection | None = None

    async def get_connection(self) -> AsyncConnection:
        self._connection = await self.session.connection()
        return self._connection

    def get_transaction(self) -> AsyncTransaction | None:
        if self._connection is None or not self.session.in_transaction():
            return None
        return self._connection.get_transaction()
