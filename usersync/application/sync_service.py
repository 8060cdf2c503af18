"""Event sync service — the task handlers the admission queue runs: check_event and catch_up."""

import logging
from typing import Any, Dict, Optional

from usersync.application.catch_up import CatchUpResult, CatchUpSynchronizer
from usersync.application.repositories import UnitOfWorkFactory
from usersync.application.task_queue import TASK_CATCH_UP, TASK_CHECK_EVENT, QueuedTask, TaskHandler, TaskQueue
from usersync.domain.models.event import CatchUpCursor, parse_timestamp


def _cursor_to_payload(cursor: Optional[CatchUpCursor]) -> Optional[Dict[str, Any]]:
    if cursor is None:
        return None
    return {
        "event_id": cursor.event_id,
        "updated_at": cursor.updated_at.isoformat() if cursor.updated_at else None,
    }


def _cursor_from_payload(payload: Optional[Dict[str, Any]]) -> Optional[CatchUpCursor]:
    if not payload or not payload.get("event_id"):
        return None
    return CatchUpCursor(
        event_id=payload["event_id"],
        updated_at=parse_timestamp(payload.get("updated_at")),
    )


class EventSyncService:
    """
    Application-layer orchestration only. No HTTP, no FastAPI, no direct infrastructure.
    Every webhook-reported event routes through a full catch-up from the newest
    ledger entry, so events whose webhooks were lost are applied too, in provider order.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        queue: TaskQueue,
        synchronizer: CatchUpSynchronizer,
        logger: logging.Logger,
    ) -> None:
        self._uow_factory = uow_factory
        self._queue = queue
        self._synchronizer = synchronizer
        self._logger = logger

    def handlers(self) -> Dict[str, TaskHandler]:
        """Task name -> handler map for the admission queue worker."""
        return {
            TASK_CHECK_EVENT: self.check_event,
            TASK_CATCH_UP: self.catch_up,
        }

    async def check_event(self, payload: Dict[str, Any]) -> Optional[QueuedTask]:
        """
        Ledger dedup check for a webhook-reported event. Already seen (at this
        updated_at or newer) is a logged no-op; otherwise schedule catch-up from
        the newest ledger entry. Returns the scheduled task, if any.
        """
        event_id = payload["event_id"]
        updated_at = parse_timestamp(payload.get("updated_at"))

        async with self._uow_factory() as uow:
            existing = await uow.ledger.find(event_id, min_updated_at=updated_at)
            if existing is not None:
                self._logger.info("event_already_processed", extra={"event_id": event_id})
                return None
            cursor = CatchUpCursor.from_entry(await uow.ledger.latest())

        task = await self._queue.enqueue(TASK_CATCH_UP, {"cursor": _cursor_to_payload(cursor)})
        self._logger.info(
            "catch_up_scheduled",
            extra={
                "event_id": event_id,
                "cursor": cursor.event_id if cursor else None,
                "catch_up_task_id": task.task_id,
            },
        )
        return task

    async def catch_up(self, payload: Dict[str, Any]) -> CatchUpResult:
        """Replay provider events after the given cursor (or inside the cold-start horizon)."""
        cursor = _cursor_from_payload(payload.get("cursor"))
        return await self._synchronizer.run(cursor)
