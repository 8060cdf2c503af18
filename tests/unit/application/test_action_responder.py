"""Unit tests for ActionResponder: signature gate, per-kind verdict handlers, signed response."""

import json
from unittest.mock import MagicMock

import pytest

from usersync.application.action_responder import ActionResponder
from usersync.domain.exceptions import MalformedPayloadError, SignatureInvalidError, SignatureMissingError
from usersync.domain.models.action import ActionKind
from usersync.infrastructure.provider.signature import WorkOSSignatureVerifier, compute_signature

ACTION_SECRET = "action_test_secret"


def action_body(obj="authentication_action_context", email="ada@example.com"):
    return json.dumps(
        {
            "id": "action_1",
            "object": obj,
            "user": {"object": "user", "id": "user_1", "email": email},
            "ip_address": "203.0.113.7",
        }
    ).encode()


def assert_signed(response, secret=ACTION_SECRET):
    payload = json.dumps(response["payload"], separators=(",", ":")).encode()
    assert response["signature"] == compute_signature(payload, str(response["payload"]["timestamp"]), secret)


@pytest.fixture
def logger():
    return MagicMock()


@pytest.fixture
def responder(logger):
    return ActionResponder(verifier=WorkOSSignatureVerifier(), secret=ACTION_SECRET, logger=logger)


async def test_unhandled_action_is_allowed(responder, signer, logger):
    body = action_body()

    response = await responder.respond(body, signer(body, ACTION_SECRET))

    assert response["object"] == "authentication_action_response"
    assert response["payload"]["verdict"] == "Allow"
    assert "error_message" not in response["payload"]
    assert_signed(response)
    logger.warning.assert_called()


async def test_handler_sees_action_and_can_deny(responder, signer):
    seen = []

    async def block_example_domain(action, verdicts):
        seen.append(action)
        if action.user["email"].endswith("@blocked.example"):
            return verdicts.deny("Sign-ups from this domain are closed")
        return verdicts.allow()

    responder.register("user_registration", block_example_domain)
    body = action_body("user_registration_action_context", email="eve@blocked.example")

    response = await responder.respond(body, signer(body, ACTION_SECRET))

    assert seen[0].kind is ActionKind.USER_REGISTRATION
    assert seen[0].data["ip_address"] == "203.0.113.7"
    assert response["object"] == "user_registration_action_response"
    assert response["payload"]["verdict"] == "Deny"
    assert response["payload"]["error_message"] == "Sign-ups from this domain are closed"
    assert_signed(response)


async def test_handlers_are_per_kind(responder, signer):
    async def deny_all(action, verdicts):
        return verdicts.deny("no")

    responder.register(ActionKind.USER_REGISTRATION, deny_all)
    body = action_body("authentication_action_context")

    response = await responder.respond(body, signer(body, ACTION_SECRET))

    assert response["payload"]["verdict"] == "Allow"


@pytest.mark.parametrize("header", [None, ""])
async def test_missing_header_rejected(responder, header):
    with pytest.raises(SignatureMissingError):
        await responder.respond(action_body(), header)


async def test_webhook_secret_does_not_sign_actions(responder, signer):
    body = action_body()

    with pytest.raises(SignatureInvalidError):
        await responder.respond(body, signer(body, "whsec_test_secret"))


async def test_unset_action_secret_fails_closed(logger, signer):
    responder = ActionResponder(verifier=WorkOSSignatureVerifier(), secret=None, logger=logger)
    body = action_body()

    with pytest.raises(SignatureInvalidError):
        await responder.respond(body, signer(body, ACTION_SECRET))


async def test_unknown_action_object_is_malformed(responder, signer):
    body = action_body("password_reset_action_context")

    with pytest.raises(MalformedPayloadError):
        await responder.respond(body, signer(body, ACTION_SECRET))


def test_register_rejects_unknown_kind(responder):
    async def handler(action, verdicts):
        return verdicts.allow()

    with pytest.raises(ValueError):
        responder.register("userRegistration", handler)
