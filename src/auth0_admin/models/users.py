"""User request and response models (Management API v2)."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ConnectionStrategy(str, Enum):
    """Kind of connection a user is created in.

    Decides which identifying credential is required.
    """

    DATABASE = "auth0"
    SMS = "sms"
    EMAIL = "email"


class UserCreateRequest(BaseModel):
    """Body of ``POST /api/v2/users``. Produced by ``UserCreateBuilder``."""

    model_config = ConfigDict(frozen=True)

    connection: str
    strategy: ConnectionStrategy = Field(
        default=ConnectionStrategy.DATABASE, exclude=True
    )
    email: str | None = None
    phone_number: str | None = None
    password: SecretStr | None = None
    # True when the builder generated the password; never sent
    password_generated: bool = Field(default=False, exclude=True)
    user_id: str | None = None
    username: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    name: str | None = None
    nickname: str | None = None
    picture: str | None = None
    email_verified: bool | None = None
    verify_email: bool | None = None
    phone_verified: bool | None = None
    blocked: bool | None = None
    user_metadata: dict[str, Any] | None = None
    app_metadata: dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(exclude_none=True, mode="json")
        if self.password is not None:
            payload["password"] = self.password.get_secret_value()
        return payload


class Identity(BaseModel):
    connection: str
    user_id: str
    provider: str
    is_social: bool | None = None


class User(BaseModel):
    """User as returned by the Management API."""

    user_id: str
    email: str | None = None
    email_verified: bool | None = None
    phone_number: str | None = None
    phone_verified: bool | None = None
    username: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    name: str | None = None
    nickname: str | None = None
    picture: str | None = None
    blocked: bool | None = None
    user_metadata: dict[str, Any] | None = None
    app_metadata: dict[str, Any] | None = None
    created_at: str | None = None
    updated_at: str | None = None
    identities: list[Identity] = []
