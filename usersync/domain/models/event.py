"""Domain model for provider events, the ledger and the catch-up cursor. Pure business semantics — no ORM or infrastructure."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from usersync.domain.exceptions import MalformedPayloadError


class EventType(str, Enum):
    """Event types the mirror applies locally. Other configured types pass through to the hook."""

    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"


DEFAULT_EVENT_TYPES: Tuple[str, ...] = tuple(t.value for t in EventType)

# Provider bookkeeping keys that are not mirrored.
PROVIDER_INTERNAL_FIELDS: FrozenSet[str] = frozenset({"object"})


def event_types_of_interest(additional: Iterable[str] = ()) -> List[str]:
    """Default user event types followed by any configured extras, without duplicates."""
    types = list(DEFAULT_EVENT_TYPES)
    for t in additional:
        if t not in types:
            types.append(t)
    return types


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 provider timestamp. Returns None for empty values."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise MalformedPayloadError(f"Invalid timestamp: {value!r}")
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise MalformedPayloadError(f"Invalid timestamp: {value!r}") from e


@dataclass(frozen=True)
class ProviderEvent:
    """A single change notification from the identity provider. Immutable once received."""

    id: str
    created_at: datetime
    type: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def subject_id(self) -> Optional[str]:
        return self.data.get("id")

    @property
    def updated_at(self) -> Optional[datetime]:
        return parse_timestamp(self.data.get("updated_at"))

    @property
    def is_user_event(self) -> bool:
        return self.type in DEFAULT_EVENT_TYPES


@dataclass(frozen=True)
class LedgerEntry:
    """One row per considered event id, ordered by insertion (seq)."""

    event_id: str
    event_type: str
    updated_at: Optional[datetime] = None
    seq: Optional[int] = None
    recorded_at: Optional[datetime] = None


@dataclass(frozen=True)
class CatchUpCursor:
    """Replay position in the provider's event history. Derived from the newest ledger entry."""

    event_id: str
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entry(cls, entry: Optional[LedgerEntry]) -> Optional["CatchUpCursor"]:
        if entry is None:
            return None
        return cls(event_id=entry.event_id, updated_at=entry.updated_at)


@dataclass(frozen=True)
class EventPage:
    """One page of the provider's list-events response."""

    data: List[ProviderEvent]
    next_cursor: Optional[str] = None
