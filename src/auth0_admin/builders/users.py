"""Builder for user creation requests."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Self

from pydantic import SecretStr

from auth0_admin.builders.base import (
    RequestBuilder,
    check_json_object,
    is_e164,
    is_email,
    is_url,
    require_text,
)
from auth0_admin.models.errors import FieldError
from auth0_admin.models.users import ConnectionStrategy, UserCreateRequest
from auth0_admin.primitives.security import random_password


class UserCreateBuilder(RequestBuilder):
    """Stages a ``UserCreateRequest``.

    The connection strategy decides the identifying credential:

    - ``auth0`` (database): email required; when no password is supplied one
      is taken from ``password_factory`` (64 random characters by default)
      and the request is marked ``password_generated``
    - ``sms``: E.164 phone number required, no password
    - ``email`` (passwordless): email required, no password

    Because the default factory is random, two builds that rely on it differ
    in their password. Pass a fixed factory where requests must compare equal.
    """

    def __init__(self, password_factory: Callable[[], str] = random_password) -> None:
        super().__init__()
        self._password_factory = password_factory
        self._connection: str | None = None
        self._strategy = ConnectionStrategy.DATABASE
        self._fields: dict[str, Any] = {}
        self._password: str | None = None

    def connection(
        self,
        connection: str,
        strategy: ConnectionStrategy | str = ConnectionStrategy.DATABASE,
    ) -> Self:
        self._check_open()
        self._connection = connection
        self._strategy = strategy
        return self

    def email(self, email: str) -> Self:
        return self._set("email", email)

    def phone_number(self, phone_number: str) -> Self:
        return self._set("phone_number", phone_number)

    def password(self, password: str) -> Self:
        self._check_open()
        self._password = password
        return self

    def user_id(self, user_id: str) -> Self:
        return self._set("user_id", user_id)

    def username(self, username: str) -> Self:
        return self._set("username", username)

    def given_name(self, given_name: str) -> Self:
        return self._set("given_name", given_name)

    def family_name(self, family_name: str) -> Self:
        return self._set("family_name", family_name)

    def name(self, name: str) -> Self:
        return self._set("name", name)

    def nickname(self, nickname: str) -> Self:
        return self._set("nickname", nickname)

    def picture(self, picture: str) -> Self:
        return self._set("picture", picture)

    def email_verified(self, verified: bool = True) -> Self:
        return self._set("email_verified", verified)

    def verify_email(self, verify: bool = True) -> Self:
        return self._set("verify_email", verify)

    def phone_verified(self, verified: bool = True) -> Self:
        return self._set("phone_verified", verified)

    def blocked(self, blocked: bool = True) -> Self:
        return self._set("blocked", blocked)

    def user_metadata(self, metadata: Mapping[str, Any]) -> Self:
        return self._set("user_metadata", metadata)

    def app_metadata(self, metadata: Mapping[str, Any]) -> Self:
        return self._set("app_metadata", metadata)

    def _set(self, field: str, value: Any) -> Self:
        self._check_open()
        self._fields[field] = value
        return self

    def build(self) -> UserCreateRequest:
        self._check_open()
        errors: list[FieldError] = []
        fields = dict(self._fields)

        require_text(errors, "connection", self._connection)
        try:
            strategy = ConnectionStrategy(self._strategy)
        except ValueError:
            strategy = None
            allowed = ", ".join(s.value for s in ConnectionStrategy)
            errors.append(
                FieldError("strategy", f"must be one of {allowed}: {self._strategy}")
            )

        email = fields.get("email")
        phone_number = fields.get("phone_number")

        if email is not None and not is_email(email):
            errors.append(FieldError("email", f"invalid email format: {email}"))
        if phone_number is not None and not is_e164(phone_number):
            errors.append(
                FieldError("phone_number", "must be in E.164 format, e.g. +14155550100")
            )

        if strategy in (ConnectionStrategy.DATABASE, ConnectionStrategy.EMAIL):
            if email is None:
                errors.append(
                    FieldError("email", f"is required for {strategy.value} connections")
                )
        elif strategy is ConnectionStrategy.SMS and phone_number is None:
            errors.append(FieldError("phone_number", "is required for sms connections"))

        if self._password is not None and strategy in (
            ConnectionStrategy.SMS,
            ConnectionStrategy.EMAIL,
        ):
            errors.append(
                FieldError("password", f"not allowed for {strategy.value} connections")
            )
        if self._password is not None and not self._password:
            errors.append(FieldError("password", "cannot be empty"))

        if fields.get("phone_verified") is not None and phone_number is None:
            errors.append(FieldError("phone_verified", "requires a phone_number"))
        if fields.get("verify_email") is not None and email is None:
            errors.append(FieldError("verify_email", "requires an email"))
        if fields.get("verify_email") and fields.get("email_verified"):
            errors.append(
                FieldError("verify_email", "cannot be set when email_verified is set")
            )

        picture = fields.get("picture")
        if picture is not None and not is_url(picture):
            errors.append(FieldError("picture", "must be an https:// URL"))

        for field in ("user_metadata", "app_metadata"):
            if field in fields:
                check_json_object(errors, field, fields[field])

        self._consume(errors)

        for field in ("user_metadata", "app_metadata"):
            if field in fields:
                fields[field] = dict(fields[field])

        password = self._password
        generated = password is None and strategy is ConnectionStrategy.DATABASE
        if generated:
            password = self._password_factory()

        return UserCreateRequest(
            connection=self._connection,
            strategy=strategy,
            password=None if password is None else SecretStr(password),
            password_generated=generated,
            **fields,
        )
