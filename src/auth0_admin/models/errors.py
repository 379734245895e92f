"""Exception hierarchy for Management API and token endpoint failures.

Every HTTP exchange ends either in a decoded payload or in exactly one
``ApiError`` subclass, so callers can branch on the type to decide whether
to retry, re-authenticate, or give up.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """A single rejected field with the reason it was rejected."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ApiError(Exception):
    """Base exception for all API related errors."""

    retryable: bool = False


class NetworkError(ApiError):
    """Raised when no HTTP response was received at all."""

    retryable = True

    def __init__(self, message: str, *, timeout: bool = False):
        super().__init__(message)
        self.timeout = timeout


class AuthenticationError(ApiError):
    """Raised for 401/403 responses and OAuth credential errors."""

    def __init__(
        self, reason: str, *, status: int | None = None, code: str | None = None
    ):
        super().__init__(f"authentication failed: {reason}")
        self.reason = reason
        self.status = status
        self.code = code


class ValidationError(ApiError):
    """Raised when a request is rejected because of its content.

    Builders raise it locally before any network I/O; the response mapper
    raises it for 422 responses and 400 responses that describe the problem.
    """

    def __init__(self, field_errors: list[FieldError] | tuple[FieldError, ...]):
        self.field_errors = tuple(field_errors)
        details = "; ".join(str(error) for error in self.field_errors)
        super().__init__(f"invalid request: {details}")

    @property
    def fields(self) -> list[str]:
        return [error.field for error in self.field_errors]


class RateLimitedError(ApiError):
    """Raised for 429 responses."""

    retryable = True

    def __init__(self, retry_after: float):
        super().__init__(f"rate limited, retry after {retry_after:g}s")
        self.retry_after = retry_after


class ServerError(ApiError):
    """Raised for 5xx responses and any status no other error claims."""

    def __init__(self, status: int, body: str = ""):
        message = f"unexpected status {status}"
        super().__init__(f"{message}: {body}" if body else message)
        self.status = status
        self.body = body

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status >= 500


class DeserializationError(ApiError):
    """Raised when a successful response body cannot be decoded."""


class NoCachedTokenError(LookupError):
    """Raised when a cache key has no token and no way to obtain one."""


class AuthorizationFlowError(Exception):
    """Raised when an authorization callback is malformed."""


class StateMismatchError(AuthorizationFlowError):
    """Raised when the callback state does not match the one we sent.

    This indicates either a missing state parameter or a forged callback.
    """
