"""Domain validators. Pure validation functions."""

from usersync.domain.validators.event_validator import (
    validate_provider_event,
    validate_subject_id,
)

__all__ = [
    "validate_provider_event",
    "validate_subject_id",
]
