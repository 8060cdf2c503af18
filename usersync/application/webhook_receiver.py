"""Webhook receiver: verify the inbound notification and admit a check task. Never mutates state."""

import logging
from typing import Optional

from usersync.application.provider import SignatureVerifier
from usersync.application.task_queue import TASK_CHECK_EVENT, QueuedTask, TaskQueue
from usersync.domain.exceptions import SignatureMissingError


class WebhookReceiver:
    """
    Only the event id and updated_at are admitted. The event body itself is
    re-fetched from the provider during catch-up before anything is mutated.
    """

    def __init__(
        self,
        verifier: SignatureVerifier,
        queue: TaskQueue,
        secret: str,
        logger: logging.Logger,
        debug: bool = False,
    ) -> None:
        self._verifier = verifier
        self._queue = queue
        self._secret = secret
        self._logger = logger
        self._debug = debug

    async def receive(self, payload: bytes, signature_header: Optional[str]) -> QueuedTask:
        """
        Verify and admit. Raises SignatureMissingError without a header; the verifier
        raises SignatureInvalidError or MalformedPayloadError.
        """
        if not signature_header or not signature_header.strip():
            raise SignatureMissingError("No signature header")

        event = self._verifier.verify(payload, signature_header, self._secret)
        if self._debug:
            self._logger.debug(
                "webhook_event_received",
                extra={"event_id": event.id, "event_type": event.type, "data": event.data},
            )

        updated_at = event.updated_at
        task = await self._queue.enqueue(
            TASK_CHECK_EVENT,
            {
                "event_id": event.id,
                "updated_at": updated_at.isoformat() if updated_at else None,
            },
        )
        self._logger.info(
            "webhook_event_admitted",
            extra={"event_id": event.id, "event_type": event.type, "task_id": task.task_id},
        )
        return task
