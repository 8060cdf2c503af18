"""Domain schemas. Provider wire formats and API responses."""

from usersync.domain.schemas.action import ActionContextPayload, SignedActionResponse
from usersync.domain.schemas.event import (
    EventListPayload,
    ProviderEventPayload,
    SyncStatusResponse,
    UserResponse,
)

__all__ = [
    "ActionContextPayload",
    "EventListPayload",
    "ProviderEventPayload",
    "SignedActionResponse",
    "SyncStatusResponse",
    "UserResponse",
]
