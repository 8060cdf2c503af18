"""Downstream hook dispatcher: one caller-registered handler, invoked after each applied event."""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from usersync.application.exceptions import DownstreamHookError

EventHook = Callable[[str, Dict[str, Any]], Awaitable[None]]

logger = logging.getLogger(__name__)


class HookDispatcher:
    """
    Holds at most one handler. Dispatch runs inside the applier's unit of work,
    so a handler failure rolls the event back and the queue redelivers it.
    Handlers must therefore be idempotent.
    """

    def __init__(self, handler: Optional[EventHook] = None) -> None:
        self._handler = handler

    @property
    def handler(self) -> Optional[EventHook]:
        return self._handler

    def register(self, handler: EventHook) -> None:
        """Register the downstream handler, replacing any previous one."""
        if self._handler is not None and self._handler is not handler:
            logger.warning("downstream_hook_replaced")
        self._handler = handler

    async def dispatch(self, event_type: str, data: Dict[str, Any]) -> None:
        if self._handler is None:
            return
        try:
            await self._handler(event_type, data)
        except Exception as e:
            logger.error(
                "downstream_hook_failed",
                extra={"event_type": event_type, "error": str(e)},
            )
            raise DownstreamHookError(f"Downstream hook failed for {event_type}: {e}") from e
