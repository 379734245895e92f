"""Value types shared by every call: tenant domain, client credentials and
bearer tokens.

Secrets are held as pydantic ``SecretStr`` so that ``repr``, ``str`` and
JSON dumps render a fixed placeholder instead of the raw value.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from auth0_admin.models.errors import FieldError, ValidationError

_HOST_LABEL = re.compile(r"[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?", re.IGNORECASE)


def check_access_token(v: SecretStr) -> SecretStr:
    """Reject access tokens that cannot be sent in an Authorization header."""
    raw = v.get_secret_value()
    if not raw:
        raise ValueError("Bearer token cannot be empty")
    if any(ch.isspace() for ch in raw):
        raise ValueError("Bearer token cannot contain whitespace")
    return v


def _host_problem(value: str) -> str | None:
    if not value:
        return "cannot be empty"
    if "://" in value:
        return "should not include a protocol (http:// or https://)"
    if value.endswith("/"):
        return "should not end with a trailing slash"
    if "/" in value or "?" in value or "#" in value:
        return "should be a bare host without a path"
    host, _, port = value.partition(":")
    if port and not (port.isdigit() and 0 < int(port) < 65536):
        return f"has an invalid port: {port}"
    if "." not in host:
        return "must be a fully qualified host (e.g. tenant.auth0.com)"
    if len(host) > 253 or not all(_HOST_LABEL.fullmatch(p) for p in host.split(".")):
        return f"is not a valid host name: {host}"
    return None


@dataclass(frozen=True)
class Domain:
    """Tenant host such as ``my-tenant.eu.auth0.com``.

    Validated once at construction; all endpoint URLs are derived from it.
    """

    host: str

    def __post_init__(self) -> None:
        problem = _host_problem(self.host)
        if problem is not None:
            raise ValidationError([FieldError("domain", f"Domain {problem}")])

    def to_url(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"https://{self.host}{path}"

    @property
    def token_endpoint(self) -> str:
        return self.to_url("/oauth/token")

    @property
    def authorization_endpoint(self) -> str:
        return self.to_url("/authorize")

    @property
    def management_audience(self) -> str:
        return self.to_url("/api/v2/")

    def __str__(self) -> str:
        return self.host


class ClientCredentials(BaseModel):
    """Application client id and (for confidential clients) its secret."""

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(min_length=1)
    client_secret: SecretStr | None = None  # None for public clients

    @property
    def is_confidential(self) -> bool:
        return self.client_secret is not None


class BearerToken(BaseModel):
    """An issued access token and its absolute expiry.

    Immutable: a refresh produces a new instance that replaces the cached one.
    """

    model_config = ConfigDict(frozen=True)

    access_token: SecretStr
    expires_at: float | None = None  # Unix timestamp, None if it never expires
    token_type: str = "Bearer"
    refresh_token: SecretStr | None = None
    scope: str | None = None

    @field_validator("access_token")
    @classmethod
    def validate_access_token(cls, v: SecretStr) -> SecretStr:
        return check_access_token(v)

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token.get_secret_value()}"

    def expires_within(self, margin: float, now: float | None = None) -> bool:
        """True if the token expires less than ``margin`` seconds from now."""
        if self.expires_at is None:
            return False
        if now is None:
            now = time.time()
        return now >= self.expires_at - margin

    def can_refresh(self) -> bool:
        return self.refresh_token is not None
