"""Auth router: POST {action_path} answers provider actions; GET /auth/providers lists accepted JWT issuers."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, Request

from usersync.api.dependencies import get_action_responder
from usersync.application.action_responder import ActionResponder
from usersync.config.settings import get_settings
from usersync.infrastructure.provider.auth_config import auth_config_providers

SIGNATURE_HEADER = "workos-signature"

router = APIRouter()


@router.post(get_settings().action_path)
async def respond_to_action(
    request: Request,
    workos_signature: Annotated[Optional[str], Header(alias=SIGNATURE_HEADER)] = None,
    responder: Annotated[ActionResponder, Depends(get_action_responder)] = ...,
):
    """Verify the action, decide allow/deny via the registered handler and return the signed verdict."""
    payload = await request.body()
    return await responder.respond(payload, workos_signature)


@router.get("/auth/providers")
async def auth_providers():
    """JWT issuers and JWKS for tokens minted for this client."""
    settings = get_settings()
    return auth_config_providers(settings.client_id, settings.provider_base_url)
