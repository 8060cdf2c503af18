"""DB-backed event ledger. Persists considered event ids to PostgreSQL (event_ledger table)."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from usersync.domain.models.event import LedgerEntry
from usersync.infrastructure.database.models import LedgerEntryRow


def _to_entry(orm: LedgerEntryRow) -> LedgerEntry:
    return LedgerEntry(
        event_id=orm.event_id,
        event_type=orm.event_type,
        updated_at=orm.updated_at,
        seq=orm.seq,
        recorded_at=orm.recorded_at,
    )


class DbEventLedger:
    """Implements EventLedger on the caller's session. The unit of work owns commit/rollback."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find(self, event_id: str, min_updated_at: Optional[datetime] = None) -> Optional[LedgerEntry]:
        stmt = select(LedgerEntryRow).where(LedgerEntryRow.event_id == event_id)
        if min_updated_at is not None:
            stmt = stmt.where(LedgerEntryRow.updated_at >= min_updated_at)
        result = await self._session.execute(stmt)
        orm = result.scalar_one_or_none()
        return _to_entry(orm) if orm is not None else None

    async def latest(self) -> Optional[LedgerEntry]:
        stmt = select(LedgerEntryRow).order_by(LedgerEntryRow.seq.desc()).limit(1)
        result = await self._session.execute(stmt)
        orm = result.scalar_one_or_none()
        return _to_entry(orm) if orm is not None else None

    async def record(self, entry: LedgerEntry) -> LedgerEntry:
        """Upsert by event_id. An existing row keeps its seq, so the cursor never moves backwards."""
        stmt = insert(LedgerEntryRow).values(
            event_id=entry.event_id,
            event_type=entry.event_type,
            updated_at=entry.updated_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["event_id"],
            set_={"event_type": entry.event_type, "updated_at": entry.updated_at},
        ).returning(LedgerEntryRow)

        result = await self._session.execute(stmt)
        return _to_entry(result.scalar_one())
