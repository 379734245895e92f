from pydantic import SecretStr

from auth0_admin.models.domain import ClientCredentials
from auth0_admin.models.grants import (
    AuthorizationCodeGrant,
    ClientCredentialsGrant,
    RefreshTokenGrant,
    TokenResponse,
)


class TestGrantBodies:
    def setup_method(self):
        # Arrange
        self.confidential = ClientCredentials(client_id="app", client_secret="shh")
        self.public = ClientCredentials(client_id="app")

    def test_client_credentials_body(self):
        # Act
        grant = ClientCredentialsGrant(audience="https://acme.auth0.com/api/v2/")
        body = grant.to_body(self.confidential)

        # Assert
        assert body == {
            "grant_type": "client_credentials",
            "client_id": "app",
            "client_secret": "shh",
            "audience": "https://acme.auth0.com/api/v2/",
        }
        assert not grant.form_encoded
        assert grant.identity == "client_credentials:https://acme.auth0.com/api/v2/"

    def test_authorization_code_body_with_pkce(self):
        # Act
        grant = AuthorizationCodeGrant(
            code="the-code",
            redirect_uri="https://app.example.com/callback",
            code_verifier="v" * 43,
            session_id="alice",
        )
        body = grant.to_body(self.public)

        # Assert
        assert body == {
            "grant_type": "authorization_code",
            "client_id": "app",
            "code": "the-code",
            "redirect_uri": "https://app.example.com/callback",
            "code_verifier": "v" * 43,
        }
        assert grant.form_encoded
        assert grant.identity == "session:alice"
        assert "the-code" not in repr(grant)

    def test_authorization_code_body_without_pkce(self):
        grant = AuthorizationCodeGrant(code="c", redirect_uri="https://a.b/cb")
        assert "code_verifier" not in grant.to_body(self.confidential)

    def test_refresh_body_and_redaction(self):
        # Act
        grant = RefreshTokenGrant(refresh_token=SecretStr("rt-123"), scope="openid")
        body = grant.to_body(self.confidential)

        # Assert
        assert body["grant_type"] == "refresh_token"
        assert body["refresh_token"] == "rt-123"
        assert body["scope"] == "openid"
        assert "rt-123" not in repr(grant)
        assert grant.identity == "session:default"


class TestTokenResponse:
    def test_expiry_is_absolute(self):
        # Arrange
        response = TokenResponse.model_validate(
            {"access_token": "at", "expires_in": 3600, "token_type": "Bearer"}
        )

        # Act
        token = response.to_bearer_token(now=1000.0)

        # Assert
        assert token.expires_at == 4600.0
        assert token.refresh_token is None

    def test_keeps_previous_refresh_token_when_not_rotated(self):
        # Arrange
        response = TokenResponse.model_validate(
            {"access_token": "at", "expires_in": 60}
        )

        # Act
        token = response.to_bearer_token(
            now=0.0, previous_refresh_token=SecretStr("old-refresh")
        )

        # Assert
        assert token.refresh_token.get_secret_value() == "old-refresh"

    def test_rotated_refresh_token_wins(self):
        response = TokenResponse.model_validate(
            {"access_token": "at", "refresh_token": "new-refresh"}
        )
        token = response.to_bearer_token(
            now=0.0, previous_refresh_token=SecretStr("old-refresh")
        )
        assert token.refresh_token.get_secret_value() == "new-refresh"
        assert token.expires_at is None
