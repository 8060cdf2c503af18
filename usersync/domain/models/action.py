"""Domain model for provider actions: allow/deny decisions the provider asks for during sign-in and sign-up."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ActionKind(str, Enum):
    AUTHENTICATION = "authentication"
    USER_REGISTRATION = "user_registration"


class Verdict(str, Enum):
    ALLOW = "Allow"
    DENY = "Deny"


# Provider `object` value of an inbound action -> the decision it asks for.
ACTION_CONTEXT_OBJECTS: Dict[str, ActionKind] = {
    "authentication_action_context": ActionKind.AUTHENTICATION,
    "user_registration_action_context": ActionKind.USER_REGISTRATION,
}


@dataclass(frozen=True)
class ProviderAction:
    """A verified action context. data is the full provider payload."""

    id: str
    object: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> ActionKind:
        return ACTION_CONTEXT_OBJECTS[self.object]

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self.data.get("user")


@dataclass(frozen=True)
class ActionVerdict:
    kind: ActionKind
    verdict: Verdict
    error_message: Optional[str] = None

    @property
    def response_object(self) -> str:
        return f"{self.kind.value}_action_response"

    @classmethod
    def allow(cls, kind: ActionKind) -> "ActionVerdict":
        return cls(kind=kind, verdict=Verdict.ALLOW)

    @classmethod
    def deny(cls, kind: ActionKind, error_message: str) -> "ActionVerdict":
        return cls(kind=kind, verdict=Verdict.DENY, error_message=error_message)
