"""Webhook and action signature verification — constant-time HMAC over the provider's signed payload.

Security contract:
- Header format: `t=<unix ms>, v1=<hex HMAC-SHA256>`; signed payload is `"<t>.<raw body>"`
- All comparisons use hmac.compare_digest() (constant-time)
- Timestamps outside the tolerance window are rejected (replay protection)
- Empty secret -> verification always fails (fail-closed)
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from typing import Callable

from pydantic import ValidationError

from usersync.domain.exceptions import MalformedPayloadError, SignatureInvalidError
from usersync.domain.models.action import ActionVerdict, ProviderAction, Verdict
from usersync.domain.models.event import ProviderEvent
from usersync.domain.schemas.action import ActionContextPayload, ActionResponseBody, SignedActionResponse
from usersync.domain.schemas.event import ProviderEventPayload

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 180


def _parse_header(signature_header: str) -> tuple[str, list[str]]:
    timestamp = ""
    signatures: list[str] = []
    for item in signature_header.split(","):
        key, _, value = item.strip().partition("=")
        if key == "t":
            timestamp = value
        elif key == "v1" and value:
            signatures.append(value)
    return timestamp, signatures


def compute_signature(payload: bytes, timestamp: str, secret: str) -> str:
    signed_payload = f"{timestamp}.".encode("utf-8") + payload
    return hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()


def parse_event(payload: bytes) -> ProviderEvent:
    """Parse a raw JSON event body. Raises MalformedPayloadError."""
    try:
        body = json.loads(payload)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedPayloadError("Webhook payload is not valid JSON") from e
    try:
        return ProviderEventPayload.model_validate(body).to_domain()
    except ValidationError as e:
        raise MalformedPayloadError(f"Webhook payload is not a provider event: {e.error_count()} error(s)") from e


def parse_action(payload: bytes) -> ProviderAction:
    """Parse a raw JSON action body. Raises MalformedPayloadError."""
    try:
        body = json.loads(payload)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedPayloadError("Action payload is not valid JSON") from e
    try:
        return ActionContextPayload.model_validate(body).to_domain()
    except ValidationError as e:
        raise MalformedPayloadError(f"Action payload is not a provider action: {e.error_count()} error(s)") from e


class WorkOSSignatureVerifier:
    """Implements SignatureVerifier and ActionVerifier for the provider's `workos-signature` header."""

    def __init__(
        self,
        tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._tolerance = tolerance_seconds
        self._clock = clock

    def verify(self, payload: bytes, signature_header: str, secret: str) -> ProviderEvent:
        self._check(payload, signature_header, secret)
        return parse_event(payload)

    def verify_action(self, payload: bytes, signature_header: str, secret: str) -> ProviderAction:
        self._check(payload, signature_header, secret)
        return parse_action(payload)

    def sign_action_response(self, verdict: ActionVerdict, secret: str) -> dict:
        """Sign a verdict the way the provider verifies it: HMAC over `"<ms>.<compact JSON payload>"`."""
        if not secret:
            raise SignatureInvalidError("Action secret is not set")
        body = ActionResponseBody(
            timestamp=int(self._clock() * 1000),
            verdict=verdict.verdict.value,
            error_message=verdict.error_message if verdict.verdict is Verdict.DENY else None,
        )
        signed_payload = json.dumps(body.model_dump(exclude_none=True), separators=(",", ":")).encode("utf-8")
        response = SignedActionResponse(
            object=verdict.response_object,
            payload=body,
            signature=compute_signature(signed_payload, str(body.timestamp), secret),
        )
        return response.model_dump(exclude_none=True)

    def _check(self, payload: bytes, signature_header: str, secret: str) -> None:
        if not secret:
            logger.warning("signing_secret_not_set")
            raise SignatureInvalidError("Signing secret is not set")

        timestamp, signatures = _parse_header(signature_header)
        if not timestamp or not signatures:
            raise SignatureInvalidError("Signature header is missing a timestamp or signature")
        try:
            issued_ms = int(timestamp)
        except ValueError as e:
            raise SignatureInvalidError("Signature timestamp is not an integer") from e

        if abs(self._clock() - issued_ms / 1000) > self._tolerance:
            logger.warning("webhook_timestamp_out_of_tolerance", extra={"signature_timestamp": issued_ms})
            raise SignatureInvalidError("Signature timestamp outside the tolerance window")

        expected = compute_signature(payload, timestamp, secret)
        if not any(hmac.compare_digest(expected, sig) for sig in signatures):
            raise SignatureInvalidError("Signature does not match payload")
