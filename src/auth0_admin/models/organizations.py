"""Organization request and response models (Management API v2)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class BrandingColors(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str
    page_background: str


class OrganizationBranding(BaseModel):
    model_config = ConfigDict(frozen=True)

    logo_url: str | None = None
    colors: BrandingColors | None = None


class EnabledConnection(BaseModel):
    """A connection members of the organization can log in with."""

    model_config = ConfigDict(frozen=True)

    connection_id: str
    assign_membership_on_login: bool = False
    show_as_button: bool = True


class OrganizationCreateRequest(BaseModel):
    """Body of ``POST /api/v2/organizations``.

    Produced by ``OrganizationCreateBuilder``; empty metadata and connection
    lists are equivalent to leaving them out.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    branding: OrganizationBranding | None = None
    metadata: dict[str, str] = {}
    enabled_connections: tuple[EnabledConnection, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(exclude_none=True, mode="json")
        if not self.metadata:
            payload.pop("metadata")
        if not self.enabled_connections:
            payload.pop("enabled_connections")
        return payload


class OrganizationPatchRequest(BaseModel):
    """Body of ``PATCH /api/v2/organizations/{id}``.

    Only fields that are set are sent, and only those are updated.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    display_name: str | None = None
    branding: OrganizationBranding | None = None
    metadata: dict[str, str] | None = None
    enabled_connections: tuple[EnabledConnection, ...] | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, mode="json")


class OrganizationMembersRequest(BaseModel):
    """Body of ``POST /api/v2/organizations/{id}/members``."""

    model_config = ConfigDict(frozen=True)

    members: tuple[str, ...]

    def to_payload(self) -> dict[str, Any]:
        return {"members": list(self.members)}


class Organization(BaseModel):
    """Organization as returned by the Management API."""

    id: str
    name: str
    display_name: str | None = None
    branding: OrganizationBranding | None = None
    metadata: dict[str, Any] | None = None
