"""Pydantic schemas for provider payloads and API responses. Strict validation, no DB or infrastructure."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from usersync.domain.models.event import ProviderEvent


# ---------------------------------------------------------------------------
# Provider wire schemas
# ---------------------------------------------------------------------------

class ProviderEventPayload(BaseModel):
    """One provider event as it appears on the wire (webhook body or list-events item)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1, validation_alias=AliasChoices("event", "type"))
    created_at: datetime = Field(..., validation_alias=AliasChoices("created_at", "createdAt"))
    data: Dict[str, Any] = Field(default_factory=dict)

    def to_domain(self) -> ProviderEvent:
        return ProviderEvent(
            id=self.id,
            created_at=self.created_at,
            type=self.type,
            data=dict(self.data),
        )


class ListMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    after: Optional[str] = None
    before: Optional[str] = None


class EventListPayload(BaseModel):
    """Provider list-events response: a page of events plus the continuation token."""

    model_config = ConfigDict(extra="ignore")

    data: List[ProviderEventPayload] = Field(default_factory=list)
    list_metadata: ListMetadata = Field(
        default_factory=ListMetadata,
        validation_alias=AliasChoices("list_metadata", "listMetadata"),
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    """Mirrored user without storage bookkeeping fields."""

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    name: Optional[str] = None
    email_verified: bool = False
    profile_picture_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"from_attributes": True}


class SyncStatusResponse(BaseModel):
    """Current catch-up cursor and admission queue depth."""

    cursor_event_id: Optional[str] = None
    cursor_updated_at: Optional[datetime] = None
    pending_tasks: int = 0
    failed_tasks: int = 0
