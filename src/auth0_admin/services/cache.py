"""In-memory token store owned by a single client instance."""

from __future__ import annotations

from dataclasses import dataclass

from auth0_admin.models.domain import BearerToken


@dataclass(frozen=True)
class CacheKey:
    """Identifies one token: tenant, application, and who the token is for.

    ``identity`` is ``client_credentials:<audience>`` for machine tokens and
    ``session:<id>`` for tokens issued on behalf of a user.
    """

    domain: str
    client_id: str
    identity: str


class TokenCache:
    """Holds at most one current ``BearerToken`` per ``CacheKey``.

    Only the token manager writes to it. Tokens are replaced wholesale,
    never mutated, so readers always see either the old or the new token.
    Nothing is persisted; the cache lives as long as its owner.
    """

    def __init__(self) -> None:
        self._tokens: dict[CacheKey, BearerToken] = {}

    def get(self, key: CacheKey) -> BearerToken | None:
        return self._tokens.get(key)

    def put(self, key: CacheKey, token: BearerToken) -> None:
        self._tokens[key] = token

    def pop(self, key: CacheKey) -> BearerToken | None:
        return self._tokens.pop(key, None)

    def clear(self) -> None:
        self._tokens.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        return f"TokenCache(keys={list(self._tokens)!r})"
