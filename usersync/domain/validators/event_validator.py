"""Validators for provider event rules. Pure functions, no infrastructure or DB access."""

from usersync.domain.exceptions import MalformedPayloadError
from usersync.domain.models.event import EventType, ProviderEvent, parse_timestamp

# User event types whose data must carry updated_at for the staleness guard.
UPDATE_CAPABLE_TYPES = frozenset({EventType.USER_CREATED.value, EventType.USER_UPDATED.value})


def validate_subject_id(event: ProviderEvent) -> None:
    """User events must name their subject in data.id. Raises MalformedPayloadError otherwise."""
    subject_id = event.data.get("id")
    if not isinstance(subject_id, str) or not subject_id.strip():
        raise MalformedPayloadError(f"Event {event.id} ({event.type}) has no subject id")


def validate_provider_event(event: ProviderEvent) -> None:
    """
    Validate a provider event before it is admitted or applied.
    Any updated_at present must parse. Pass-through types are otherwise only
    checked for an id; user types need a subject id and, when update-capable,
    an updated_at.
    """
    if not event.id or not event.id.strip():
        raise MalformedPayloadError("Event id must not be empty")
    updated_at = parse_timestamp(event.data.get("updated_at"))
    if not event.is_user_event:
        return
    validate_subject_id(event)
    if event.type in UPDATE_CAPABLE_TYPES and updated_at is None:
        raise MalformedPayloadError(f"Event {event.id} ({event.type}) has no updated_at")
