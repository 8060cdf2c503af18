"""Pydantic schemas for provider actions: the inbound action context and the signed verdict response."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from usersync.domain.models.action import ACTION_CONTEXT_OBJECTS, ProviderAction


class ActionContextPayload(BaseModel):
    """Inbound action body. Only id and object are checked; everything else is passed to the handler."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1)
    object: str

    @field_validator("object")
    @classmethod
    def known_action_object(cls, v: str) -> str:
        if v not in ACTION_CONTEXT_OBJECTS:
            raise ValueError(f"unsupported action object {v!r}")
        return v

    def to_domain(self) -> ProviderAction:
        return ProviderAction(id=self.id, object=self.object, data=self.model_dump())


class ActionResponseBody(BaseModel):
    timestamp: int
    verdict: str
    error_message: Optional[str] = None


class SignedActionResponse(BaseModel):
    """What the provider expects back: the verdict plus an HMAC over it."""

    object: str
    payload: ActionResponseBody
    signature: str
