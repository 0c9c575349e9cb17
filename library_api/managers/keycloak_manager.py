from typing import Any

from keycloak import KeycloakOpenID

from library_api.settings import app_settings


class KeycloakManager:
    """
    OpenID Connect client for validating Keycloak bearer tokens.

    Uses the native async methods of python-keycloak so token decoding does
    not block the event loop.
    """

    def __init__(self) -> None:
        self.openid = KeycloakOpenID(
            server_url=app_settings.KEYCLOAK_BASE_URL,
            client_id=app_settings.KEYCLOAK_CLIENT_ID,
            realm_name=app_settings.KEYCLOAK_REALM,
        )

    async def decode_token_async(self, access_token: str) -> dict[str, Any]:
        """
        Validate an access token against the realm's public key.

        Args:
            access_token: Raw JWT from the Authorization header.

        Returns:
            Decoded token claims.

        Raises:
            JWTExpired: If the token has expired.
            KeycloakAuthenticationError: If Keycloak rejects the client.
            ValueError: If the token cannot be decoded.
        """
        return await self.openid.a_decode_token(access_token)
