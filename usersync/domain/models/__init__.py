"""Domain models. Pure business entities."""

from usersync.domain.models.action import ActionKind, ActionVerdict, ProviderAction, Verdict
from usersync.domain.models.event import (
    DEFAULT_EVENT_TYPES,
    CatchUpCursor,
    EventPage,
    EventType,
    LedgerEntry,
    ProviderEvent,
    event_types_of_interest,
)
from usersync.domain.models.user import User

__all__ = [
    "DEFAULT_EVENT_TYPES",
    "ActionKind",
    "ActionVerdict",
    "CatchUpCursor",
    "EventPage",
    "EventType",
    "LedgerEntry",
    "ProviderAction",
    "ProviderEvent",
    "User",
    "Verdict",
    "event_types_of_interest",
]
