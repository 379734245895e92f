"""Management API v2 operations.

Each call fetches a bearer token through ``TokenManager.current_or_refresh``,
sends one JSON request and maps the response. Nothing is retried here:
``RateLimitedError.retry_after`` and ``ApiError.retryable`` tell the caller
what it may do next.
"""

from __future__ import annotations

import logging
import time
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from auth0_admin.models.dbconnections import ChangePasswordRequest
from auth0_admin.models.domain import Domain
from auth0_admin.models.errors import AuthenticationError, FieldError, ValidationError
from auth0_admin.models.organizations import (
    Organization,
    OrganizationCreateRequest,
    OrganizationMembersRequest,
    OrganizationPatchRequest,
)
from auth0_admin.models.tickets import PasswordChangeTicket, PasswordChangeTicketRequest
from auth0_admin.models.users import User, UserCreateRequest
from auth0_admin.primitives.responses import (
    DEFAULT_RETRY_AFTER,
    map_response,
    map_text_response,
    send,
)
from auth0_admin.services.cache import CacheKey
from auth0_admin.services.tokens import TokenManager

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _organization_path(organization_id: str, suffix: str = "") -> str:
    if not organization_id or not organization_id.strip():
        raise ValidationError([FieldError("organization_id", "cannot be empty")])
    return f"/api/v2/organizations/{quote(organization_id, safe='')}{suffix}"


class ManagementClient:
    """Typed calls against ``https://{domain}/api/v2``.

    A 401 or 403 from the Management API drops the cached token for
    ``cache_key`` before the ``AuthenticationError`` propagates, so the next
    call obtains a fresh one.
    """

    def __init__(
        self,
        domain: Domain,
        token_manager: TokenManager,
        http_client: httpx.AsyncClient,
        *,
        cache_key: CacheKey | None = None,
        default_retry_after: float = DEFAULT_RETRY_AFTER,
    ):
        self.domain = domain
        self.token_manager = token_manager
        self.cache_key = cache_key or token_manager.machine_key()
        self.default_retry_after = default_retry_after
        self._http_client = http_client

    async def create_organization(
        self, request: OrganizationCreateRequest
    ) -> Organization:
        return await self._call(
            "POST", "/api/v2/organizations", request.to_payload(), Organization
        )

    async def patch_organization(
        self, organization_id: str, request: OrganizationPatchRequest
    ) -> Organization:
        path = _organization_path(organization_id)
        return await self._call("PATCH", path, request.to_payload(), Organization)

    async def add_organization_members(
        self, organization_id: str, request: OrganizationMembersRequest
    ) -> None:
        """Add users to an organization; the API answers 204 No Content."""
        path = _organization_path(organization_id, "/members")
        await self._call("POST", path, request.to_payload(), None)

    async def create_user(self, request: UserCreateRequest) -> User:
        return await self._call("POST", "/api/v2/users", request.to_payload(), User)

    async def create_password_change_ticket(
        self, request: PasswordChangeTicketRequest
    ) -> PasswordChangeTicket:
        return await self._call(
            "POST",
            "/api/v2/tickets/password-change",
            request.to_payload(),
            PasswordChangeTicket,
        )

    async def change_password(self, request: ChangePasswordRequest) -> str:
        """Ask the tenant to email a password reset link.

        This is an Authentication API endpoint and takes no bearer token.

        Returns:
            The plain-text confirmation message from the server
        """
        response = await send(
            self._http_client,
            "POST",
            self.domain.to_url("/dbconnections/change_password"),
            json=request.to_payload(),
            headers={"Accept": "text/plain, application/json"},
        )
        message = map_text_response(
            response, default_retry_after=self.default_retry_after
        )
        logger.info(
            f"Requested password reset email for connection {request.connection}"
        )
        return message

    async def _call(
        self,
        method: str,
        path: str,
        payload: dict[str, Any],
        model: type[ModelT] | None,
    ) -> ModelT | None:
        token = await self.token_manager.current_or_refresh(self.cache_key)

        logger.debug(f"Management API request: {method} {path}")
        response = await send(
            self._http_client,
            method,
            self.domain.to_url(path),
            json=payload,
            headers={
                "Authorization": token.authorization_header,
                "Accept": "application/json",
            },
        )
        try:
            return map_response(
                response,
                model,
                default_retry_after=self.default_retry_after,
                now=time.time(),
            )
        except AuthenticationError:
            # Keep a token another caller renewed while this request was out
            if self.token_manager.cache.get(self.cache_key) is token:
                self.token_manager.invalidate(self.cache_key)
            raise
