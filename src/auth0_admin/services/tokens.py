"""OAuth token acquisition, caching and renewal.

Runs the client credentials, authorization code (with optional PKCE) and
refresh token grants against ``POST https://{domain}/oauth/token``, caches
the resulting bearer tokens, and collapses concurrent renewals of the same
token into a single request.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial

import httpx

from auth0_admin.models.domain import BearerToken, ClientCredentials, Domain
from auth0_admin.models.errors import NoCachedTokenError
from auth0_admin.models.grants import (
    DEFAULT_SESSION,
    ClientCredentialsGrant,
    GrantRequest,
    RefreshTokenGrant,
    TokenResponse,
    machine_identity,
    session_identity,
)
from auth0_admin.primitives.responses import DEFAULT_RETRY_AFTER, map_response, send
from auth0_admin.services.cache import CacheKey, TokenCache

logger = logging.getLogger(__name__)

# Renew this many seconds before the literal expiry to absorb clock skew and
# request latency.
DEFAULT_REFRESH_MARGIN = 60.0


@dataclass
class _Flight:
    grant: GrantRequest
    task: asyncio.Task[BearerToken]


class TokenManager:
    """Obtains, caches and renews bearer tokens for one application.

    Network failures and error responses are raised as ``ApiError``
    subclasses and never retried here; retry policy belongs to the caller.
    The one thing absorbed internally is deduplication: while a grant for a
    cache key is in flight, other callers for that key wait on the same
    request instead of sending their own.

    All state is owned by the instance and touched only from the event loop
    it runs on.
    """

    def __init__(
        self,
        domain: Domain,
        credentials: ClientCredentials,
        http_client: httpx.AsyncClient,
        *,
        audience: str | None = None,
        refresh_margin: float = DEFAULT_REFRESH_MARGIN,
        default_retry_after: float = DEFAULT_RETRY_AFTER,
        cache: TokenCache | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the token manager.

        Args:
            domain: Tenant domain hosting the token endpoint
            credentials: Application client id and secret
            http_client: Transport used for token requests
            audience: API identifier for machine tokens, defaults to the
                Management API of ``domain``
            refresh_margin: Seconds before expiry at which a cached token
                is treated as expired
            default_retry_after: Retry hint reported for 429 responses that
                carry none
            cache: Token store, a fresh one if omitted
            clock: Source of the current Unix time
        """
        if refresh_margin < 0:
            raise ValueError("refresh_margin cannot be negative")
        self.domain = domain
        self.credentials = credentials
        self.audience = audience or domain.management_audience
        self.refresh_margin = refresh_margin
        self.default_retry_after = default_retry_after
        self._http_client = http_client
        self._cache = cache if cache is not None else TokenCache()
        self._clock = clock
        self._in_flight: dict[CacheKey, _Flight] = {}
        self._origins: dict[CacheKey, GrantRequest] = {}

    @property
    def cache(self) -> TokenCache:
        return self._cache

    def key_for(self, grant: GrantRequest) -> CacheKey:
        return self._key(grant.identity)

    def machine_key(self, audience: str | None = None) -> CacheKey:
        return self._key(machine_identity(audience or self.audience))

    def session_key(self, session_id: str = DEFAULT_SESSION) -> CacheKey:
        return self._key(session_identity(session_id))

    async def acquire(self, grant: GrantRequest) -> BearerToken:
        """Run ``grant`` against the token endpoint and cache the result.

        If an identical grant for the same key is already in flight the call
        joins it. A different grant for a busy key waits for the running one
        to settle before starting, so a key never has two requests in flight.

        Raises:
            ApiError: If the exchange fails; the cache is left untouched
        """
        key = self.key_for(grant)
        while (flight := self._running(key)) is not None:
            if flight.grant == grant:
                return await asyncio.shield(flight.task)
            await asyncio.wait([flight.task])
        return await self._start(key, grant)

    async def current_or_refresh(self, key: CacheKey) -> BearerToken:
        """Return the cached token for ``key``, renewing it if needed.

        A token is renewed once it is within ``refresh_margin`` seconds of
        expiry. Renewal uses the cached refresh token when there is one and
        otherwise replays the client credentials grant for machine keys.

        Raises:
            ApiError: If the renewal request fails
            NoCachedTokenError: If there is nothing cached and no way to
                obtain a token for ``key`` without user interaction
        """
        token = self._cache.get(key)
        if token is not None and not token.expires_within(
            self.refresh_margin, self._clock()
        ):
            return token

        flight = self._running(key)
        if flight is not None:
            logger.debug(f"Joining in-flight token request for {key.identity}")
            return await asyncio.shield(flight.task)

        return await self._start(key, self._renewal_grant(key, token))

    def invalidate(self, key: CacheKey) -> None:
        """Drop the cached token for ``key`` so the next use renews it."""
        if self._cache.pop(key) is not None:
            logger.info(f"Invalidated cached token for {key.identity}")

    def clear(self) -> None:
        """Drop every cached token."""
        self._cache.clear()
        self._origins.clear()

    def _key(self, identity: str) -> CacheKey:
        return CacheKey(
            domain=self.domain.host,
            client_id=self.credentials.client_id,
            identity=identity,
        )

    def _running(self, key: CacheKey) -> _Flight | None:
        flight = self._in_flight.get(key)
        if flight is None or flight.task.done():
            return None
        return flight

    def _renewal_grant(self, key: CacheKey, token: BearerToken | None) -> GrantRequest:
        origin = self._origins.get(key)

        if token is not None and token.refresh_token is not None:
            session_id = getattr(origin, "session_id", DEFAULT_SESSION)
            return RefreshTokenGrant(
                refresh_token=token.refresh_token, session_id=session_id
            )

        if isinstance(origin, ClientCredentialsGrant):
            return origin
        if key == self.machine_key():
            return ClientCredentialsGrant(audience=self.audience)

        raise NoCachedTokenError(
            f"No token cached for {key.identity} and no refresh token to renew it"
        )

    async def _start(self, key: CacheKey, grant: GrantRequest) -> BearerToken:
        task = asyncio.create_task(
            self._exchange(key, grant), name=f"token-exchange:{key.identity}"
        )
        flight = _Flight(grant=grant, task=task)
        self._in_flight[key] = flight
        task.add_done_callback(partial(self._finish_flight, key, flight))

        # Shielded so that a cancelled caller does not cancel the request
        # other callers are waiting on.
        return await asyncio.shield(task)

    def _finish_flight(
        self, key: CacheKey, flight: _Flight, task: asyncio.Task[BearerToken]
    ) -> None:
        if self._in_flight.get(key) is flight:
            del self._in_flight[key]
        if not task.cancelled():
            task.exception()  # Mark retrieved when every caller went away

    async def _exchange(self, key: CacheKey, grant: GrantRequest) -> BearerToken:
        body = grant.to_body(self.credentials)

        logger.debug(
            f"Token request: grant_type={grant.grant_type}, "
            f"client_id={self.credentials.client_id}, key={key.identity}"
        )

        if grant.form_encoded:
            content_type = "application/x-www-form-urlencoded"
            payload = {"data": body}
        else:
            content_type = "application/json"
            payload = {"json": body}

        response = await send(
            self._http_client,
            "POST",
            self.domain.token_endpoint,
            headers={"Content-Type": content_type, "Accept": "application/json"},
            **payload,
        )
        token_response = map_response(
            response, TokenResponse, default_retry_after=self.default_retry_after
        )

        previous_refresh = (
            grant.refresh_token if isinstance(grant, RefreshTokenGrant) else None
        )
        token = token_response.to_bearer_token(
            now=self._clock(), previous_refresh_token=previous_refresh
        )

        self._cache.put(key, token)
        self._origins[key] = grant

        logger.info(
            f"Obtained {grant.grant_type} token for {key.identity}"
            f" (expires_in={token_response.expires_in})"
        )
        return token
