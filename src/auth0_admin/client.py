"""High level client tying settings, tokens, flows and the Management API.

Example:
    async with Auth0Client(ClientSettings.from_env()) as client:
        await client.authenticate()
        request = (
            OrganizationCreateBuilder()
            .name("acme")
            .display_name("Acme Inc.")
            .build()
        )
        organization = await client.management.create_organization(request)
"""

from __future__ import annotations

import logging
from types import TracebackType

import httpx

from auth0_admin.config import ClientSettings
from auth0_admin.models.domain import BearerToken
from auth0_admin.models.errors import AuthorizationFlowError, NoCachedTokenError
from auth0_admin.models.grants import (
    DEFAULT_SESSION,
    AuthorizationCodeGrant,
    ClientCredentialsGrant,
    RefreshTokenGrant,
)
from auth0_admin.primitives.pkce import PKCEParameters
from auth0_admin.services.flow import AuthorizationFlow
from auth0_admin.services.management import ManagementClient
from auth0_admin.services.tokens import TokenManager

logger = logging.getLogger(__name__)


class Auth0Client:
    """One application's view of one tenant.

    Owns the ``httpx.AsyncClient`` it creates and closes it on exit; an
    injected client is left for the caller to close.
    """

    def __init__(
        self,
        settings: ClientSettings,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=settings.timeout
        )

        domain = settings.domain_value()
        credentials = settings.credentials()

        self.tokens = TokenManager(
            domain,
            credentials,
            self._http_client,
            audience=settings.audience,
            refresh_margin=settings.refresh_margin,
            default_retry_after=settings.default_retry_after,
        )
        self.management = ManagementClient(
            domain,
            self.tokens,
            self._http_client,
            cache_key=self.tokens.machine_key(),
            default_retry_after=settings.default_retry_after,
        )
        self.flow = AuthorizationFlow(domain, credentials)

    async def __aenter__(self) -> Auth0Client:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self.tokens.clear()
        if self._owns_http_client:
            await self._http_client.aclose()

    async def authenticate(
        self, scope: str | None = None, organization: str | None = None
    ) -> BearerToken:
        """Run the client credentials grant for the configured audience."""
        grant = ClientCredentialsGrant(
            audience=self.settings.audience, scope=scope, organization=organization
        )
        return await self.tokens.acquire(grant)

    async def complete_authorization(
        self,
        callback_url: str,
        expected_state: str,
        pkce: PKCEParameters | None = None,
        redirect_uri: str | None = None,
        session_id: str = DEFAULT_SESSION,
    ) -> BearerToken:
        """Check the callback and exchange its code for a session token.

        Raises:
            StateMismatchError: If the callback state does not match
            AuthorizationFlowError: If the callback carries an error or no
                code, or no redirect URI is known
            ApiError: If the code exchange fails
        """
        redirect_uri = redirect_uri or self.settings.redirect_uri
        if not redirect_uri:
            raise AuthorizationFlowError("redirect_uri is required for code exchange")

        response = self.flow.parse_callback(callback_url, expected_state)
        if response.is_error():
            raise AuthorizationFlowError(
                f"Authorization failed: {response.error} - "
                f"{response.error_description}"
            )
        if not response.is_success():
            raise AuthorizationFlowError("Authorization callback has no code")

        grant = AuthorizationCodeGrant(
            code=response.code,
            redirect_uri=redirect_uri,
            code_verifier=None if pkce is None else pkce.code_verifier,
            session_id=session_id,
        )
        return await self.tokens.acquire(grant)

    async def refresh(
        self, session_id: str = DEFAULT_SESSION, *, force: bool = False
    ) -> BearerToken:
        """Return a usable token for ``session_id``, refreshing when due.

        With ``force`` the refresh grant runs even if the cached token is
        still fresh.

        Raises:
            NoCachedTokenError: If the session has no token to refresh
        """
        key = self.tokens.session_key(session_id)
        if not force:
            return await self.tokens.current_or_refresh(key)

        token = self.tokens.cache.get(key)
        if token is None or token.refresh_token is None:
            raise NoCachedTokenError(
                f"No refresh token cached for session {session_id}"
            )
        logger.debug(f"Forcing refresh for session {session_id}")
        return await self.tokens.acquire(
            RefreshTokenGrant(refresh_token=token.refresh_token, session_id=session_id)
        )
