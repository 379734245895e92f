"""Authorization code flow orchestration.

Builds the ``/authorize`` redirect with PKCE and state, then parses and
checks the callback. The code exchange itself is a token grant and runs
through ``TokenManager``.
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs, urlparse

from auth0_admin.models.domain import ClientCredentials, Domain
from auth0_admin.models.errors import AuthorizationFlowError
from auth0_admin.models.flow import AuthorizationRequest, AuthorizationResponse
from auth0_admin.primitives.pkce import PKCEManager, PKCEParameters
from auth0_admin.primitives.security import generate_state, validate_state

logger = logging.getLogger(__name__)


class AuthorizationFlow:
    """Starts authorization code flows and validates their callbacks.

    Handles:
    - PKCE parameter generation
    - State parameter security (CSRF protection)
    - Authorization URL construction
    - Callback URL parsing and validation
    """

    def __init__(
        self,
        domain: Domain,
        credentials: ClientCredentials,
        pkce_manager: PKCEManager | None = None,
    ):
        self.domain = domain
        self.credentials = credentials
        self._pkce_manager = pkce_manager or PKCEManager()

    def start(
        self,
        redirect_uri: str,
        scope: str | None = None,
        audience: str | None = None,
        organization: str | None = None,
    ) -> tuple[str, PKCEParameters, str]:
        """Start an authorization code flow.

        Args:
            redirect_uri: URI to redirect to after authorization
            scope: Optional space separated scopes, e.g. ``openid offline_access``
            audience: Optional API identifier the token should be issued for
            organization: Optional organization id to log in to

        Returns:
            Tuple of (authorization_url, pkce_parameters, state). Keep the
            PKCE parameters for the code exchange and the state for
            ``parse_callback``.
        """
        pkce = self._pkce_manager.generate()
        state = generate_state()

        request = AuthorizationRequest(
            authorization_endpoint=self.domain.authorization_endpoint,
            client_id=self.credentials.client_id,
            redirect_uri=redirect_uri,
            code_challenge=pkce.code_challenge,
            code_challenge_method=pkce.code_challenge_method,
            state=state,
            scope=scope,
            audience=audience,
            organization=organization,
        )

        logger.info(
            f"Generated authorization URL for client {self.credentials.client_id}"
        )
        return request.build_authorization_url(), pkce, state

    def parse_callback(
        self, callback_url: str, expected_state: str
    ) -> AuthorizationResponse:
        """Parse the callback URL and check its state parameter.

        An ``error`` in the callback is returned, not raised, so the caller
        can show it to the user.

        Raises:
            StateMismatchError: If the state is missing or does not match
            AuthorizationFlowError: If the URL cannot be parsed
        """
        response = self._parse_callback_url(callback_url)
        validate_state(expected_state, response.state)

        if response.is_success():
            logger.info("Authorization callback received an authorization code")
        elif response.is_error():
            logger.warning(
                f"Authorization callback contained error: {response.error} - "
                f"{response.error_description}"
            )
        else:
            logger.warning("Authorization callback missing both code and error")

        return response

    def _parse_callback_url(self, callback_url: str) -> AuthorizationResponse:
        try:
            parsed = urlparse(callback_url)
        except ValueError as e:
            raise AuthorizationFlowError(f"Failed to parse callback URL: {e}") from e

        query_params = parse_qs(parsed.query)

        def get_single_param(key: str) -> str | None:
            values = query_params.get(key, [])
            return values[0] if values else None

        return AuthorizationResponse(
            code=get_single_param("code"),
            state=get_single_param("state"),
            error=get_single_param("error"),
            error_description=get_single_param("error_description"),
        )
