"""SQL Unit of Work — one AsyncSession, one transaction, all repositories.

Invariants:
    - Every repository exposed by one SqlUnitOfWork shares one AsyncSession
    - Nothing is committed unless commit() is awaited inside the `async with` block
    - Exceptional exit (including asyncio.CancelledError) rolls back every write
    - SQLAlchemy errors leave as TransientStoreError / ConcurrencyError
      (mapping owned by DatabaseSessionManager.session)

Design Decisions:
    - Built on DatabaseSessionManager.session(): rollback and error mapping live in one place
    - AsyncExitStack keeps the manager's context open for the lifetime of the unit of work
"""

from contextlib import AsyncExitStack

from storycompass.infrastructure.database import DatabaseSessionManager
from storycompass.infrastructure.sql_repositories import (
    SqlAwardLedger, SqlBadgeCatalog, SqlChoiceHistory,
    SqlProfileRepository, SqlSessionRepository,
)


class SqlUnitOfWork:
    """UnitOfWork over a pooled DatabaseSessionManager."""

    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager
        self._stack: AsyncExitStack | None = None

    async def __aenter__(self) -> "SqlUnitOfWork":
        self._stack = AsyncExitStack()
        db = await self._stack.enter_async_context(self._manager.session())
        self._db = db
        self.sessions = SqlSessionRepository(db)
        self.choices = SqlChoiceHistory(db)
        self.badges = SqlBadgeCatalog(db)
        self.awards = SqlAwardLedger(db)
        self.profiles = SqlProfileRepository(db)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        stack, self._stack = self._stack, None
        return await stack.__aexit__(exc_type, exc, tb)

    async def commit(self) -> None:
        await self._db.commit()


def sql_uow_factory(manager: DatabaseSessionManager):
    """Zero-arg factory handed to services (one fresh unit of work per call)."""
    return lambda: SqlUnitOfWork(manager)
