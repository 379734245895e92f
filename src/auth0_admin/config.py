"""Client configuration.

Settings are a plain pydantic model so they can be built in code, from a
mapping, or from ``AUTH0_*`` environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)

from auth0_admin.models.domain import ClientCredentials, Domain
from auth0_admin.models.errors import FieldError, ValidationError
from auth0_admin.primitives.responses import DEFAULT_RETRY_AFTER
from auth0_admin.services.tokens import DEFAULT_REFRESH_MARGIN

DEFAULT_TIMEOUT = 30.0

_ENV_FIELDS = {
    "DOMAIN": "domain",
    "CLIENT_ID": "client_id",
    "CLIENT_SECRET": "client_secret",
    "AUDIENCE": "audience",
    "REDIRECT_URI": "redirect_uri",
    "SCOPE": "scope",
    "TIMEOUT": "timeout",
    "REFRESH_MARGIN": "refresh_margin",
    "DEFAULT_RETRY_AFTER": "default_retry_after",
}
_REQUIRED_ENV = ("DOMAIN", "CLIENT_ID")


class ClientSettings(BaseModel):
    """Tenant, application and tuning parameters for ``Auth0Client``."""

    model_config = ConfigDict(frozen=True)

    domain: str
    client_id: str = Field(min_length=1)
    client_secret: SecretStr | None = None
    audience: str
    redirect_uri: str | None = None
    scope: str | None = None
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    refresh_margin: float = Field(default=DEFAULT_REFRESH_MARGIN, ge=0)
    default_retry_after: float = Field(default=DEFAULT_RETRY_AFTER, ge=0)

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        # Raises our ValidationError, which pydantic lets propagate unwrapped
        return Domain(v).host

    @model_validator(mode="before")
    @classmethod
    def default_audience(cls, data: Any) -> Any:
        if (
            isinstance(data, Mapping)
            and data.get("domain")
            and not data.get("audience")
        ):
            audience = Domain(str(data["domain"])).management_audience
            data = {**data, "audience": audience}
        return data

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, prefix: str = "AUTH0_"
    ) -> ClientSettings:
        """Build settings from ``{prefix}DOMAIN``, ``{prefix}CLIENT_ID`` etc.

        Empty variables count as unset.

        Raises:
            ValidationError: Naming every required variable that is missing
        """
        if environ is None:
            environ = os.environ

        missing = [
            FieldError(f"{prefix}{name}", "environment variable is not set")
            for name in _REQUIRED_ENV
            if not environ.get(f"{prefix}{name}")
        ]
        if missing:
            raise ValidationError(missing)

        values: dict[str, Any] = {}
        for name, field in _ENV_FIELDS.items():
            value = environ.get(f"{prefix}{name}")
            if value:
                values[field] = value
        return cls.model_validate(values)

    def domain_value(self) -> Domain:
        return Domain(self.domain)

    def credentials(self) -> ClientCredentials:
        return ClientCredentials(
            client_id=self.client_id, client_secret=self.client_secret
        )
