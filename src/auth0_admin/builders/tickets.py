"""Builder for password change ticket requests."""

from __future__ import annotations

from typing import Self

from auth0_admin.builders.base import RequestBuilder, is_email, is_url, require_text
from auth0_admin.models.errors import FieldError
from auth0_admin.models.tickets import DEFAULT_TICKET_TTL, PasswordChangeTicketRequest


class PasswordChangeTicketBuilder(RequestBuilder):
    """Stages a ``PasswordChangeTicketRequest``.

    Only ``user_id`` is required. Defaults: ``ttl_sec`` 432000 (5 days),
    ``mark_email_as_verified`` False, ``include_email_in_redirect`` False.
    ``result_url`` and ``client_id`` are mutually exclusive: with a client
    id the tenant redirects to that application's default login route.
    """

    def __init__(self) -> None:
        super().__init__()
        self._user_id: str | None = None
        self._ttl_sec = DEFAULT_TICKET_TTL
        self._mark_email_as_verified = False
        self._include_email_in_redirect = False
        self._result_url: str | None = None
        self._new_email: str | None = None
        self._connection_id: str | None = None
        self._client_id: str | None = None
        self._organization_id: str | None = None

    def user_id(self, user_id: str) -> Self:
        self._check_open()
        self._user_id = user_id
        return self

    def ttl_sec(self, ttl_sec: int) -> Self:
        self._check_open()
        self._ttl_sec = ttl_sec
        return self

    def mark_email_as_verified(self, verified: bool = True) -> Self:
        self._check_open()
        self._mark_email_as_verified = verified
        return self

    def include_email_in_redirect(self, include: bool = True) -> Self:
        self._check_open()
        self._include_email_in_redirect = include
        return self

    def result_url(self, result_url: str) -> Self:
        self._check_open()
        self._result_url = result_url
        return self

    def new_email(self, email: str) -> Self:
        self._check_open()
        self._new_email = email
        return self

    def connection_id(self, connection_id: str) -> Self:
        self._check_open()
        self._connection_id = connection_id
        return self

    def client_id(self, client_id: str) -> Self:
        self._check_open()
        self._client_id = client_id
        return self

    def organization_id(self, organization_id: str) -> Self:
        self._check_open()
        self._organization_id = organization_id
        return self

    def build(self) -> PasswordChangeTicketRequest:
        self._check_open()
        errors: list[FieldError] = []

        require_text(errors, "user_id", self._user_id)
        if isinstance(self._ttl_sec, bool) or not isinstance(self._ttl_sec, int):
            errors.append(FieldError("ttl_sec", "must be an integer"))
        elif self._ttl_sec <= 0:
            errors.append(FieldError("ttl_sec", "must be positive"))
        if self._new_email is not None and not is_email(self._new_email):
            errors.append(
                FieldError("new_email", f"invalid email format: {self._new_email}")
            )
        if self._result_url is not None and not is_url(
            self._result_url, ("http", "https")
        ):
            errors.append(FieldError("result_url", "must be an http(s) URL"))
        if self._result_url is not None and self._client_id is not None:
            errors.append(FieldError("result_url", "cannot be combined with client_id"))
        if self._organization_id is not None and self._client_id is None:
            errors.append(FieldError("organization_id", "requires client_id"))

        self._consume(errors)
        return PasswordChangeTicketRequest(
            user_id=self._user_id,
            ttl_sec=self._ttl_sec,
            mark_email_as_verified=self._mark_email_as_verified,
            include_email_in_redirect=self._include_email_in_redirect,
            result_url=self._result_url,
            new_email=self._new_email,
            connection_id=self._connection_id,
            client_id=self._client_id,
            organization_id=self._organization_id,
        )
