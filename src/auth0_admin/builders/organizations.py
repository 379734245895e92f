"""Builders for organization create, patch and member requests."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Self

from auth0_admin.builders.base import (
    RequestBuilder,
    check_string_metadata,
    is_hex_color,
    is_url,
    require_text,
)
from auth0_admin.models.errors import FieldError
from auth0_admin.models.organizations import (
    BrandingColors,
    EnabledConnection,
    OrganizationBranding,
    OrganizationCreateRequest,
    OrganizationMembersRequest,
    OrganizationPatchRequest,
)

_ORGANIZATION_NAME = re.compile(r"[a-z0-9][a-z0-9_-]{0,49}")
DISPLAY_NAME_MAX_LENGTH = 255


def _check_name(errors: list[FieldError], name: str) -> None:
    if not _ORGANIZATION_NAME.fullmatch(name):
        errors.append(
            FieldError(
                "name",
                "must be 1-50 lowercase letters, digits, '-' or '_' "
                "and start with a letter or digit",
            )
        )


def _check_display_name(errors: list[FieldError], display_name: str) -> None:
    if len(display_name) > DISPLAY_NAME_MAX_LENGTH:
        errors.append(
            FieldError(
                "display_name",
                f"cannot be longer than {DISPLAY_NAME_MAX_LENGTH} characters",
            )
        )


class _OrganizationFieldsBuilder(RequestBuilder):
    """Branding, metadata and connection fields shared by create and patch."""

    def __init__(self) -> None:
        super().__init__()
        self._name: str | None = None
        self._display_name: str | None = None
        self._logo_url: str | None = None
        self._primary: str | None = None
        self._page_background: str | None = None
        self._branding_set = False
        self._metadata: dict[str, str] | None = None
        self._connections: list[EnabledConnection] | None = None

    def name(self, name: str) -> Self:
        self._check_open()
        self._name = name
        return self

    def display_name(self, display_name: str) -> Self:
        self._check_open()
        self._display_name = display_name
        return self

    def branding(
        self,
        *,
        logo_url: str | None = None,
        primary: str | None = None,
        page_background: str | None = None,
    ) -> Self:
        self._check_open()
        self._branding_set = True
        self._logo_url = logo_url
        self._primary = primary
        self._page_background = page_background
        return self

    def metadata(self, metadata: Mapping[str, str]) -> Self:
        """Replace all metadata entries."""
        self._check_open()
        self._metadata = dict(metadata)
        return self

    def metadata_entry(self, key: str, value: str) -> Self:
        self._check_open()
        if self._metadata is None:
            self._metadata = {}
        self._metadata[key] = value
        return self

    def enabled_connections(self, connections: Iterable[EnabledConnection]) -> Self:
        """Replace all enabled connections."""
        self._check_open()
        self._connections = list(connections)
        return self

    def enabled_connection(
        self,
        connection_id: str,
        *,
        assign_membership_on_login: bool = False,
        show_as_button: bool = True,
    ) -> Self:
        self._check_open()
        if self._connections is None:
            self._connections = []
        self._connections.append(
            EnabledConnection(
                connection_id=connection_id,
                assign_membership_on_login=assign_membership_on_login,
                show_as_button=show_as_button,
            )
        )
        return self

    def _build_branding(self, errors: list[FieldError]) -> OrganizationBranding | None:
        if not self._branding_set:
            return None

        if self._logo_url is not None and not is_url(self._logo_url):
            errors.append(FieldError("branding.logo_url", "must be an https:// URL"))

        colors = None
        if self._primary is not None or self._page_background is not None:
            for field, value in (
                ("branding.colors.primary", self._primary),
                ("branding.colors.page_background", self._page_background),
            ):
                if value is None:
                    errors.append(FieldError(field, "is required when colors are set"))
                elif not is_hex_color(value):
                    errors.append(
                        FieldError(field, f"must be a #rgb or #rrggbb color: {value}")
                    )
            if self._primary and self._page_background:
                colors = BrandingColors(
                    primary=self._primary, page_background=self._page_background
                )

        if self._logo_url is None and colors is None:
            return None
        return OrganizationBranding(logo_url=self._logo_url, colors=colors)

    def _check_metadata(self, errors: list[FieldError]) -> None:
        if self._metadata is not None:
            check_string_metadata(errors, "metadata", self._metadata)

    def _check_connections(self, errors: list[FieldError]) -> None:
        if self._connections is None:
            return
        seen: set[str] = set()
        for index, connection in enumerate(self._connections):
            field = f"enabled_connections[{index}].connection_id"
            if not connection.connection_id.strip():
                errors.append(FieldError(field, "cannot be empty"))
            elif connection.connection_id in seen:
                message = f"duplicate connection {connection.connection_id}"
                errors.append(FieldError(field, message))
            seen.add(connection.connection_id)


class OrganizationCreateBuilder(_OrganizationFieldsBuilder):
    """Stages an ``OrganizationCreateRequest``.

    ``name`` and ``display_name`` are required; branding, metadata and
    enabled connections are optional and validated independently.
    """

    def build(self) -> OrganizationCreateRequest:
        self._check_open()
        errors: list[FieldError] = []

        require_text(errors, "name", self._name)
        if self._name:
            _check_name(errors, self._name)
        require_text(errors, "display_name", self._display_name)
        if self._display_name:
            _check_display_name(errors, self._display_name)
        branding = self._build_branding(errors)
        self._check_metadata(errors)
        self._check_connections(errors)

        self._consume(errors)
        return OrganizationCreateRequest(
            name=self._name,
            display_name=self._display_name,
            branding=branding,
            metadata=self._metadata or {},
            enabled_connections=tuple(self._connections or ()),
        )


class OrganizationPatchBuilder(_OrganizationFieldsBuilder):
    """Stages an ``OrganizationPatchRequest``; at least one field must change."""

    def build(self) -> OrganizationPatchRequest:
        self._check_open()
        errors: list[FieldError] = []

        if self._name is not None:
            _check_name(errors, self._name)
        if self._display_name is not None:
            if not self._display_name.strip():
                errors.append(FieldError("display_name", "cannot be empty"))
            _check_display_name(errors, self._display_name)
        branding = self._build_branding(errors)
        self._check_metadata(errors)
        self._check_connections(errors)

        if (
            self._name is None
            and self._display_name is None
            and not self._branding_set
            and self._metadata is None
            and self._connections is None
        ):
            errors.append(FieldError("request", "at least one field must be set"))

        self._consume(errors)
        return OrganizationPatchRequest(
            name=self._name,
            display_name=self._display_name,
            branding=branding,
            metadata=self._metadata,
            enabled_connections=(
                None if self._connections is None else tuple(self._connections)
            ),
        )


class OrganizationMembersBuilder(RequestBuilder):
    """Stages an ``OrganizationMembersRequest`` of one or more user ids."""

    def __init__(self) -> None:
        super().__init__()
        self._members: list[str] = []

    def member(self, user_id: str) -> Self:
        self._check_open()
        self._members.append(user_id)
        return self

    def members(self, user_ids: Iterable[str]) -> Self:
        self._check_open()
        self._members.extend(user_ids)
        return self

    def build(self) -> OrganizationMembersRequest:
        self._check_open()
        errors: list[FieldError] = []

        if not self._members:
            errors.append(FieldError("members", "at least one member is required"))
        for index, user_id in enumerate(self._members):
            if not user_id.strip():
                errors.append(FieldError(f"members[{index}]", "cannot be empty"))

        self._consume(errors)
        return OrganizationMembersRequest(members=tuple(dict.fromkeys(self._members)))
