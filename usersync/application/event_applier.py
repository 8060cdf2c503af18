"""Event applier — maps one provider event onto the user mirror, the ledger and the downstream hook."""

import logging
from enum import Enum

from usersync.application.hook_dispatcher import HookDispatcher
from usersync.application.repositories import SyncUnitOfWork, UnitOfWorkFactory
from usersync.core.context import event_id_ctx
from usersync.domain.exceptions import MalformedPayloadError
from usersync.domain.models.event import EventType, LedgerEntry, ProviderEvent
from usersync.domain.models.user import User
from usersync.domain.validators.event_validator import validate_provider_event


class ApplyOutcome(str, Enum):
    """What applying one event did to local state."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    PASSED_THROUGH = "passed_through"  # no local mutation; hook only
    DUPLICATE = "duplicate"  # already in the ledger; nothing happens
    ALREADY_EXISTS = "already_exists"
    STALE = "stale"
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"

    @property
    def mutated(self) -> bool:
        return self in (ApplyOutcome.CREATED, ApplyOutcome.UPDATED, ApplyOutcome.DELETED)


class EventApplier:
    """
    Applies events one at a time. Each call is one unit of work: the user mutation,
    the ledger write and the hook dispatch commit together or not at all.
    Must only be called from the admission queue's worker.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        hooks: HookDispatcher,
        logger: logging.Logger,
        debug: bool = False,
    ) -> None:
        self._uow_factory = uow_factory
        self._hooks = hooks
        self._logger = logger
        self._debug = debug

    async def apply(self, event: ProviderEvent) -> ApplyOutcome:
        token = event_id_ctx.set(event.id)
        try:
            async with self._uow_factory() as uow:
                return await self._apply(uow, event)
        finally:
            event_id_ctx.reset(token)

    async def _apply(self, uow: SyncUnitOfWork, event: ProviderEvent) -> ApplyOutcome:
        if self._debug:
            self._logger.debug(
                "event_considered",
                extra={"event_type": event.type, "data": event.data},
            )

        if await uow.ledger.find(event.id) is not None:
            self._logger.info("event_already_processed", extra={"event_type": event.type})
            return ApplyOutcome.DUPLICATE

        try:
            validate_provider_event(event)
            updated_at = event.updated_at
        except MalformedPayloadError as e:
            # Recorded so the cursor moves past it; the hook never sees it.
            self._logger.error("event_malformed", extra={"event_type": event.type, "error": e.message})
            await uow.ledger.record(LedgerEntry(event_id=event.id, event_type=event.type))
            return ApplyOutcome.MALFORMED

        if event.type == EventType.USER_CREATED:
            outcome = await self._user_created(uow, event)
        elif event.type == EventType.USER_UPDATED:
            outcome = await self._user_updated(uow, event)
        elif event.type == EventType.USER_DELETED:
            outcome = await self._user_deleted(uow, event)
        else:
            outcome = ApplyOutcome.PASSED_THROUGH

        await uow.ledger.record(
            LedgerEntry(
                event_id=event.id,
                event_type=event.type,
                updated_at=updated_at,
            )
        )
        await self._hooks.dispatch(event.type, event.data)

        self._logger.info(
            "event_applied",
            extra={"event_type": event.type, "outcome": outcome.value, "user_id": event.subject_id},
        )
        return outcome

    async def _user_created(self, uow: SyncUnitOfWork, event: ProviderEvent) -> ApplyOutcome:
        if await uow.users.get(event.subject_id) is not None:
            self._logger.warning("user_already_exists", extra={"user_id": event.subject_id})
            return ApplyOutcome.ALREADY_EXISTS
        await uow.users.insert(User.from_event_data(event.data))
        return ApplyOutcome.CREATED

    async def _user_updated(self, uow: SyncUnitOfWork, event: ProviderEvent) -> ApplyOutcome:
        user = await uow.users.get(event.subject_id)
        if user is None:
            self._logger.error("user_not_found", extra={"user_id": event.subject_id, "event_type": event.type})
            return ApplyOutcome.NOT_FOUND
        incoming = event.updated_at
        # Equal timestamps are treated as already applied.
        if user.updated_at is not None and user.updated_at >= incoming:
            self._logger.warning(
                "user_update_stale",
                extra={
                    "user_id": user.id,
                    "stored_updated_at": user.updated_at.isoformat(),
                    "incoming_updated_at": incoming.isoformat(),
                },
            )
            return ApplyOutcome.STALE
        await uow.users.update(user.patched(event.data))
        return ApplyOutcome.UPDATED

    async def _user_deleted(self, uow: SyncUnitOfWork, event: ProviderEvent) -> ApplyOutcome:
        if await uow.users.get(event.subject_id) is None:
            self._logger.warning("user_not_found", extra={"user_id": event.subject_id, "event_type": event.type})
            return ApplyOutcome.NOT_FOUND
        await uow.users.delete(event.subject_id)
        return ApplyOutcome.DELETED
