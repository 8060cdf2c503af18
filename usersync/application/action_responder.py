"""Action responder: verify an inbound provider action, ask the registered handler for a verdict, sign it."""

import logging
from typing import Awaitable, Callable, Dict, Optional, Union

from usersync.application.provider import ActionVerifier
from usersync.domain.exceptions import SignatureMissingError
from usersync.domain.models.action import ActionKind, ActionVerdict, ProviderAction


class ActionVerdicts:
    """allow()/deny() builders bound to the kind of action being decided."""

    def __init__(self, kind: ActionKind) -> None:
        self._kind = kind

    def allow(self) -> ActionVerdict:
        return ActionVerdict.allow(self._kind)

    def deny(self, error_message: str) -> ActionVerdict:
        return ActionVerdict.deny(self._kind, error_message)


ActionHandler = Callable[[ProviderAction, ActionVerdicts], Awaitable[ActionVerdict]]


class ActionResponder:
    """
    One handler per action kind. An action with no registered handler is allowed,
    so an unconfigured deployment never blocks sign-in. Unlike webhooks, actions
    are answered synchronously and never touch the mirror or the queue.
    """

    def __init__(
        self,
        verifier: ActionVerifier,
        secret: Optional[str],
        logger: logging.Logger,
        debug: bool = False,
    ) -> None:
        self._verifier = verifier
        self._secret = secret or ""
        self._logger = logger
        self._debug = debug
        self._handlers: Dict[ActionKind, ActionHandler] = {}

    def register(self, kind: Union[ActionKind, str], handler: ActionHandler) -> None:
        kind = ActionKind(kind)
        if kind in self._handlers and self._handlers[kind] is not handler:
            self._logger.warning("action_handler_replaced", extra={"action_kind": kind.value})
        self._handlers[kind] = handler

    async def respond(self, payload: bytes, signature_header: Optional[str]) -> dict:
        """
        Verify, decide and sign. Raises SignatureMissingError without a header; the
        verifier raises SignatureInvalidError or MalformedPayloadError.
        """
        if not signature_header or not signature_header.strip():
            raise SignatureMissingError("No signature header")

        action = self._verifier.verify_action(payload, signature_header, self._secret)
        if self._debug:
            self._logger.debug(
                "action_received",
                extra={"action_id": action.id, "action_kind": action.kind.value, "data": action.data},
            )

        verdict = await self.decide(action)
        self._logger.info(
            "action_decided",
            extra={"action_id": action.id, "action_kind": action.kind.value, "verdict": verdict.verdict.value},
        )
        return self._verifier.sign_action_response(verdict, self._secret)

    async def decide(self, action: ProviderAction) -> ActionVerdict:
        verdicts = ActionVerdicts(action.kind)
        handler = self._handlers.get(action.kind)
        if handler is None:
            self._logger.warning("action_handler_missing", extra={"action_kind": action.kind.value})
            return verdicts.allow()
        return await handler(action, verdicts)
