"""Catch-up synchronizer: pages through the provider's event history and replays it through the applier."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from usersync.application.event_applier import ApplyOutcome, EventApplier
from usersync.application.provider import EventProvider
from usersync.domain.models.event import CatchUpCursor

DEFAULT_HORIZON = timedelta(minutes=5)


class CatchUpState(str, Enum):
    PAGINATING = "paginating"
    DONE = "done"


@dataclass
class CatchUpResult:
    pages: int = 0
    events_seen: int = 0
    outcomes: Dict[str, int] = field(default_factory=dict)
    last_event_id: Optional[str] = None
    # Continuation token the final page was requested with.
    provider_cursor: Optional[str] = None
    state: CatchUpState = CatchUpState.PAGINATING

    @property
    def events_applied(self) -> int:
        return sum(n for o, n in self.outcomes.items() if ApplyOutcome(o).mutated)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CatchUpSynchronizer:
    """
    Two states: PAGINATING until the provider stops returning a continuation
    token, then DONE. A provider error aborts the run and propagates to the
    queue; events applied before the error stay committed.
    """

    def __init__(
        self,
        provider: EventProvider,
        applier: EventApplier,
        event_types: Sequence[str],
        logger: logging.Logger,
        horizon: timedelta = DEFAULT_HORIZON,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._provider = provider
        self._applier = applier
        self._event_types: List[str] = list(event_types)
        self._logger = logger
        self._horizon = horizon
        self._clock = clock

    @property
    def event_types(self) -> List[str]:
        return list(self._event_types)

    async def run(self, cursor: Optional[CatchUpCursor] = None) -> CatchUpResult:
        result = CatchUpResult()
        after = cursor.event_id if cursor else None
        # Cold start: bounded replay window instead of the provider's whole history.
        range_start = None if after else self._clock() - self._horizon

        self._logger.info(
            "catch_up_started",
            extra={
                "cursor": after,
                "range_start": range_start.isoformat() if range_start else None,
                "event_types": self._event_types,
            },
        )

        while result.state is CatchUpState.PAGINATING:
            result.provider_cursor = after
            page = await self._provider.list_events(
                self._event_types,
                after=after,
                range_start=range_start,
            )
            result.pages += 1
            for event in page.data:
                outcome = await self._applier.apply(event)
                result.events_seen += 1
                result.outcomes[outcome.value] = result.outcomes.get(outcome.value, 0) + 1
                result.last_event_id = event.id

            after = page.next_cursor
            range_start = None
            if not after:
                result.state = CatchUpState.DONE

        self._logger.info(
            "catch_up_done",
            extra={
                "pages": result.pages,
                "events_seen": result.events_seen,
                "events_applied": result.events_applied,
                "last_event_id": result.last_event_id,
                "provider_cursor": result.provider_cursor,
            },
        )
        return result
