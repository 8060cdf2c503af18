"""SQLAlchemy unit of work: one session and one transaction per applied event."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from usersync.infrastructure.database.ledger_repository_db import DbEventLedger
from usersync.infrastructure.database.user_repository_db import DbUserStore


class DbSyncUnitOfWork:
    """Implements SyncUnitOfWork. Commits on clean exit; rolls back if the block raises."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "DbSyncUnitOfWork":
        self._session = self._session_factory()
        self.ledger = DbEventLedger(self._session)
        self.users = DbUserStore(self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                await self._session.commit()
            else:
                await self._session.rollback()
        finally:
            await self._session.close()
            self._session = None


class DbUnitOfWorkFactory:
    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    def __call__(self) -> DbSyncUnitOfWork:
        return DbSyncUnitOfWork(self._session_factory)
