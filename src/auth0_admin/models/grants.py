"""Token endpoint grant requests and responses.

Each grant variant carries exactly the fields its protocol needs and knows
how to render its body for ``POST /oauth/token``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import ClassVar

from pydantic import BaseModel, SecretStr, field_validator

from auth0_admin.models.domain import BearerToken, ClientCredentials, check_access_token

DEFAULT_SESSION = "default"


def machine_identity(audience: str) -> str:
    return f"client_credentials:{audience}"


def session_identity(session_id: str) -> str:
    return f"session:{session_id}"


def _client_fields(credentials: ClientCredentials) -> dict[str, str]:
    data = {"client_id": credentials.client_id}
    if credentials.client_secret is not None:
        data["client_secret"] = credentials.client_secret.get_secret_value()
    return data


@dataclass(frozen=True)
class ClientCredentialsGrant:
    """Machine-to-machine grant scoped to an API audience."""

    grant_type: ClassVar[str] = "client_credentials"
    form_encoded: ClassVar[bool] = False

    audience: str
    scope: str | None = None
    organization: str | None = None

    @property
    def identity(self) -> str:
        return machine_identity(self.audience)

    def to_body(self, credentials: ClientCredentials) -> dict[str, str]:
        data = {"grant_type": self.grant_type, **_client_fields(credentials)}
        data["audience"] = self.audience
        if self.scope:
            data["scope"] = self.scope
        if self.organization:
            data["organization"] = self.organization
        return data


@dataclass(frozen=True)
class AuthorizationCodeGrant:
    """Exchange of an authorization code obtained by a user redirect.

    ``code_verifier`` is the PKCE verifier generated before the redirect;
    leave it unset for flows that did not use PKCE.
    """

    grant_type: ClassVar[str] = "authorization_code"
    form_encoded: ClassVar[bool] = True

    code: str = field(repr=False)
    redirect_uri: str
    code_verifier: str | None = field(default=None, repr=False)
    session_id: str = DEFAULT_SESSION

    @property
    def identity(self) -> str:
        return session_identity(self.session_id)

    def to_body(self, credentials: ClientCredentials) -> dict[str, str]:
        data = {"grant_type": self.grant_type, **_client_fields(credentials)}
        data["code"] = self.code
        data["redirect_uri"] = self.redirect_uri
        if self.code_verifier:
            data["code_verifier"] = self.code_verifier
        return data


@dataclass(frozen=True)
class RefreshTokenGrant:
    """Exchange of a previously issued refresh token (RFC 6749 Section 6)."""

    grant_type: ClassVar[str] = "refresh_token"
    form_encoded: ClassVar[bool] = True

    refresh_token: SecretStr
    scope: str | None = None
    session_id: str = DEFAULT_SESSION

    @property
    def identity(self) -> str:
        return session_identity(self.session_id)

    def to_body(self, credentials: ClientCredentials) -> dict[str, str]:
        data = {"grant_type": self.grant_type, **_client_fields(credentials)}
        data["refresh_token"] = self.refresh_token.get_secret_value()
        if self.scope:
            data["scope"] = self.scope
        return data


GrantRequest = ClientCredentialsGrant | AuthorizationCodeGrant | RefreshTokenGrant


class TokenResponse(BaseModel):
    """Successful token endpoint response (RFC 6749 Section 5.1)."""

    access_token: SecretStr
    token_type: str = "Bearer"
    expires_in: int | None = None  # Seconds until expiry
    refresh_token: SecretStr | None = None
    scope: str | None = None
    id_token: SecretStr | None = None

    # Same rule as BearerToken.access_token
    @field_validator("access_token")
    @classmethod
    def validate_access_token(cls, v: SecretStr) -> SecretStr:
        return check_access_token(v)

    def to_bearer_token(
        self,
        now: float | None = None,
        previous_refresh_token: SecretStr | None = None,
    ) -> BearerToken:
        """Convert to a ``BearerToken`` with an absolute expiry.

        A response that does not rotate the refresh token keeps
        ``previous_refresh_token``.
        """
        if now is None:
            now = time.time()
        return BearerToken(
            access_token=self.access_token,
            expires_at=None if self.expires_in is None else now + self.expires_in,
            token_type=self.token_type,
            refresh_token=self.refresh_token or previous_refresh_token,
            scope=self.scope,
        )
