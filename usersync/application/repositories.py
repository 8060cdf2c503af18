"""Ledger and user store protocols. Application layer depends on these; infrastructure implements them."""

from datetime import datetime
from typing import Optional, Protocol

from usersync.domain.models.event import LedgerEntry
from usersync.domain.models.user import User


class EventLedger(Protocol):
    """Durable record of every considered event id. Sole source of truth for "already processed"."""

    async def find(self, event_id: str, min_updated_at: Optional[datetime] = None) -> Optional[LedgerEntry]:
        """
        Return the entry for event_id, or None. When min_updated_at is given, only an
        entry whose recorded updated_at is >= min_updated_at counts as a match.
        """
        ...

    async def latest(self) -> Optional[LedgerEntry]:
        """Return the most recently inserted entry (the catch-up cursor), or None."""
        ...

    async def record(self, entry: LedgerEntry) -> LedgerEntry:
        """Insert the entry, or update the existing entry with the same event_id. Returns the stored entry."""
        ...


class UserStore(Protocol):
    """Mirrored users keyed by provider subject id."""

    async def get(self, user_id: str) -> Optional[User]:
        ...

    async def insert(self, user: User) -> None:
        ...

    async def update(self, user: User) -> None:
        ...

    async def delete(self, user_id: str) -> None:
        ...


class SyncUnitOfWork(Protocol):
    """
    Transaction boundary for applying one event. Commits on clean exit,
    rolls back if the block raises.
    """

    ledger: EventLedger
    users: UserStore

    async def __aenter__(self) -> "SyncUnitOfWork":
        ...

    async def __aexit__(self, exc_type, exc, tb) -> None:
        ...


class UnitOfWorkFactory(Protocol):
    def __call__(self) -> SyncUnitOfWork:
        ...
