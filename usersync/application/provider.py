"""Protocols for the identity provider's capabilities: webhook and action verification, event listing."""

from datetime import datetime
from typing import Optional, Protocol, Sequence

from usersync.domain.models.action import ActionVerdict, ProviderAction
from usersync.domain.models.event import EventPage, ProviderEvent


class SignatureVerifier(Protocol):
    """Validates a webhook payload against the shared secret. Raises SignatureInvalidError or MalformedPayloadError."""

    def verify(self, payload: bytes, signature_header: str, secret: str) -> ProviderEvent:
        ...


class EventProvider(Protocol):
    """Provider list-events API. Pagination continues while next_cursor is set."""

    async def list_events(
        self,
        types: Sequence[str],
        after: Optional[str] = None,
        range_start: Optional[datetime] = None,
    ) -> EventPage:
        ...


class ActionVerifier(Protocol):
    """Verifies inbound actions and signs the verdict sent back."""

    def verify_action(self, payload: bytes, signature_header: str, secret: str) -> ProviderAction:
        ...

    def sign_action_response(self, verdict: ActionVerdict, secret: str) -> dict:
        ...
