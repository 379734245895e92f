"""Authentication API change-password request."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ChangePasswordRequest(BaseModel):
    """Body of ``POST /dbconnections/change_password``.

    Asks the tenant to email the user a password reset link.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str
    email: str
    connection: str
    organization: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
