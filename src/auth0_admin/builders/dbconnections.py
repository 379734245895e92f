"""Builder for the Authentication API change-password request."""

from __future__ import annotations

from typing import Self

from auth0_admin.builders.base import RequestBuilder, is_email, require_text
from auth0_admin.models.dbconnections import ChangePasswordRequest
from auth0_admin.models.errors import FieldError


class ChangePasswordBuilder(RequestBuilder):
    def __init__(self) -> None:
        super().__init__()
        self._client_id: str | None = None
        self._email: str | None = None
        self._connection: str | None = None
        self._organization: str | None = None

    def client_id(self, client_id: str) -> Self:
        self._check_open()
        self._client_id = client_id
        return self

    def email(self, email: str) -> Self:
        self._check_open()
        self._email = email
        return self

    def connection(self, connection: str) -> Self:
        self._check_open()
        self._connection = connection
        return self

    def organization(self, organization: str) -> Self:
        self._check_open()
        self._organization = organization
        return self

    def build(self) -> ChangePasswordRequest:
        self._check_open()
        errors: list[FieldError] = []

        require_text(errors, "client_id", self._client_id)
        require_text(errors, "email", self._email)
        if self._email and not is_email(self._email):
            errors.append(FieldError("email", f"invalid email format: {self._email}"))
        require_text(errors, "connection", self._connection)

        self._consume(errors)
        return ChangePasswordRequest(
            client_id=self._client_id,
            email=self._email,
            connection=self._connection,
            organization=self._organization,
        )
