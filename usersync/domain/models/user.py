"""Domain model for a mirrored provider user."""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Dict, Optional

from usersync.domain.exceptions import MalformedPayloadError
from usersync.domain.models.event import PROVIDER_INTERNAL_FIELDS, parse_timestamp

_TIMESTAMP_FIELDS = ("created_at", "updated_at")


@dataclass
class User:
    """
    Local copy of a provider user, keyed by the provider subject id.
    Fields the mirror does not model explicitly are kept in attributes.
    """

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email_verified: bool = False
    profile_picture_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> Optional[str]:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or None

    @classmethod
    def from_event_data(cls, data: Dict[str, Any]) -> "User":
        """Build a user from event data, dropping provider bookkeeping fields."""
        if not data.get("id"):
            raise MalformedPayloadError("User event data has no id")
        return cls(id=data["id"]).patched(data)

    def patched(self, data: Dict[str, Any]) -> "User":
        """Return a copy with the event data applied. The subject id never changes."""
        known = {f.name for f in fields(self)} - {"id", "attributes"}
        changes: Dict[str, Any] = {}
        attributes = dict(self.attributes)
        for key, value in data.items():
            if key == "id" or key in PROVIDER_INTERNAL_FIELDS:
                continue
            if key in _TIMESTAMP_FIELDS:
                changes[key] = parse_timestamp(value)
            elif key in known:
                changes[key] = value
            else:
                attributes[key] = value
        return replace(self, attributes=attributes, **changes)
