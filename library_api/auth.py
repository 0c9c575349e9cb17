import asyncio
import base64
import binascii
import time

from fastapi.responses import JSONResponse
from fastapi.security.utils import get_authorization_scheme_param
from jwcrypto.jwt import JWTExpired
from keycloak.exceptions import KeycloakAuthenticationError
from starlette.authentication import AuthCredentials, AuthenticationBackend
from starlette.requests import HTTPConnection

from library_api.constants import LOCAL_SESSION_TTL_SECONDS
from library_api.dependencies import get_keycloak_manager
from library_api.exceptions import AuthenticationError
from library_api.logging import logger
from library_api.repositories.user_repository import UserRepository
from library_api.schemas.user import UserModel
from library_api.settings import app_settings
from library_api.storage.db import async_session
from library_api.utils.password import verify_password


class AuthBackend(AuthenticationBackend):  # type: ignore[misc]
    """
    Authentication backend for Keycloak bearer tokens and local accounts.

    Requests without an Authorization header are anonymous: reads are
    public, and the role gate on write endpoints answers 401. A header that
    is present but invalid fails the request with 401 right away.

    Supported schemes:
        Bearer: Keycloak access token, decoded with KeycloakManager.
        Basic: ``email:password`` checked against the local users table
            (only when LOCAL_AUTH_ENABLED is set).

    Raises:
        AuthenticationError: When authentication fails due to:
            - Expired JWT tokens (reason='token_expired')
            - Invalid credentials (reason='invalid_credentials')
            - Token decoding errors (reason='token_decode_error')
            - Unknown or disabled schemes (reason='unsupported_scheme')
    """

    def __init__(self) -> None:
        super().__init__()
        self.excluded_paths = app_settings.EXCLUDED_PATHS

    async def authenticate(
        self, conn: HTTPConnection
    ) -> tuple[AuthCredentials, UserModel] | None:
        if self.excluded_paths.match(conn.url.path):
            return None

        authorization = conn.headers.get("authorization")
        if not authorization:
            return None

        scheme, credentials = get_authorization_scheme_param(authorization)
        scheme = scheme.lower()

        if scheme == "bearer":
            user = await self._authenticate_bearer(credentials)
        elif scheme == "basic" and app_settings.LOCAL_AUTH_ENABLED:
            user = await self._authenticate_basic(credentials)
        else:
            raise AuthenticationError(
                "unsupported_scheme",
                f"Unsupported authorization scheme: {scheme or 'none'}",
            )

        return AuthCredentials(user.roles), user

    async def _authenticate_bearer(self, access_token: str) -> UserModel:
        try:
            user_data = await get_keycloak_manager().decode_token_async(
                access_token
            )
            return UserModel(**user_data)

        except JWTExpired as ex:
            logger.error(f"JWT token expired: {ex}")
            raise AuthenticationError("token_expired", str(ex))

        except KeycloakAuthenticationError as ex:
            logger.error(f"Invalid credentials: {ex}")
            raise AuthenticationError("invalid_credentials", str(ex))

        except ValueError as ex:
            logger.error(f"Error occurred while decode auth token: {ex}")
            raise AuthenticationError("token_decode_error", str(ex))

    async def _authenticate_basic(self, credentials: str) -> UserModel:
        try:
            decoded = base64.b64decode(credentials, validate=True).decode(
                "utf-8"
            )
        except (binascii.Error, UnicodeDecodeError) as ex:
            raise AuthenticationError(
                "token_decode_error", "Malformed basic credentials"
            ) from ex

        email, separator, password = decoded.partition(":")
        if not separator:
            raise AuthenticationError(
                "token_decode_error", "Malformed basic credentials"
            )

        async with async_session() as session:
            account = await UserRepository(session).get_by_email(email)

        # bcrypt is CPU bound; keep it off the event loop
        if account is None or not await asyncio.to_thread(
            verify_password, password, account.password
        ):
            logger.info(f"Rejected basic credentials for {email}")
            raise AuthenticationError(
                "invalid_credentials", "Invalid email or password"
            )

        return UserModel(
            sub=str(account.id),
            exp=int(time.time()) + LOCAL_SESSION_TTL_SECONDS,
            preferred_username=account.email,
            roles=list(account.roles),
        )


def on_auth_error(conn: HTTPConnection, exc: Exception) -> JSONResponse:
    """Answer a failed authentication with 401 and the failure reason."""
    reason = getattr(exc, "reason", "authentication_failed")
    return JSONResponse(
        status_code=401,
        content={"detail": str(exc), "reason": reason},
        headers={"WWW-Authenticate": "Bearer"},
    )
