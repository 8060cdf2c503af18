"""Domain layer: models, schemas, validators, exceptions. Pure business logic only."""

from usersync.domain.exceptions import (
    DomainError,
    MalformedPayloadError,
    SignatureInvalidError,
    SignatureMissingError,
    UserNotFoundError,
)
from usersync.domain.models import (
    CatchUpCursor,
    EventPage,
    EventType,
    LedgerEntry,
    ProviderEvent,
    User,
)
from usersync.domain.validators import validate_provider_event

__all__ = [
    "CatchUpCursor",
    "DomainError",
    "EventPage",
    "EventType",
    "LedgerEntry",
    "MalformedPayloadError",
    "ProviderEvent",
    "SignatureInvalidError",
    "SignatureMissingError",
    "User",
    "UserNotFoundError",
    "validate_provider_event",
]
