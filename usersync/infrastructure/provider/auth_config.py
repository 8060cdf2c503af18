"""JWT issuer settings for tokens the provider mints for this client."""

from typing import Any, Dict, List


def auth_config_providers(client_id: str, base_url: str = "https://api.workos.com") -> List[Dict[str, Any]]:
    """
    The two issuers a relying service must accept: SSO tokens (which carry the
    client id as audience) and user-management tokens. Both share one JWKS.
    """
    base = base_url.rstrip("/")
    jwks = f"{base}/sso/jwks/{client_id}"
    return [
        {
            "type": "customJwt",
            "issuer": f"{base}/",
            "algorithm": "RS256",
            "jwks": jwks,
            "application_id": client_id,
        },
        {
            "type": "customJwt",
            "issuer": f"{base}/user_management/{client_id}",
            "algorithm": "RS256",
            "jwks": jwks,
        },
    ]
