"""Webhook router: POST {webhook_path}. Admission only; application happens asynchronously in the queue."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse

from usersync.api.dependencies import get_webhook_receiver
from usersync.application.webhook_receiver import WebhookReceiver
from usersync.config.settings import get_settings

SIGNATURE_HEADER = "workos-signature"

router = APIRouter()


@router.post(get_settings().webhook_path, response_class=PlainTextResponse)
async def receive_webhook(
    request: Request,
    workos_signature: Annotated[Optional[str], Header(alias=SIGNATURE_HEADER)] = None,
    receiver: Annotated[WebhookReceiver, Depends(get_webhook_receiver)] = ...,
):
    """Verify the provider signature and admit a check task. 200 means admitted, not applied."""
    payload = await request.body()
    # Signature and payload errors map to 400/401/422 via the app's exception handlers.
    await receiver.receive(payload, workos_signature)
    return PlainTextResponse("OK", status_code=200)
