"""Password change ticket models (Management API v2)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Server-side default lifetime of a ticket: 5 days.
DEFAULT_TICKET_TTL = 432000


class PasswordChangeTicketRequest(BaseModel):
    """Body of ``POST /api/v2/tickets/password-change``.

    Produced by ``PasswordChangeTicketBuilder``. Fields with defaults are
    always sent so the request is explicit about what the ticket does.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    ttl_sec: int = DEFAULT_TICKET_TTL
    mark_email_as_verified: bool = False
    include_email_in_redirect: bool = Field(
        default=False, serialization_alias="includeEmailInRedirect"
    )
    result_url: str | None = None
    new_email: str | None = None
    connection_id: str | None = None
    client_id: str | None = None
    organization_id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, by_alias=True, mode="json")


class PasswordChangeTicket(BaseModel):
    ticket: str
