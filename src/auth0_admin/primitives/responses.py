"""Decoding of HTTP responses into payloads or ``ApiError`` subclasses.

The mapping is total: every response either decodes into the expected
payload or raises exactly one error type.

    2xx, decodes            -> payload
    2xx, does not decode    -> DeserializationError
    429                     -> RateLimitedError
    401 / 403               -> AuthenticationError
    OAuth credential codes  -> AuthenticationError
    422, 400 with details   -> ValidationError
    anything else           -> ServerError (literal status)
    no response at all      -> NetworkError
"""

from __future__ import annotations

import logging
import time
from email.utils import parsedate_to_datetime
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from auth0_admin.models.errors import (
    ApiError,
    AuthenticationError,
    DeserializationError,
    FieldError,
    NetworkError,
    RateLimitedError,
    ServerError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_RETRY_AFTER = 1.0

# OAuth error codes that mean the credentials, code or token were rejected,
# whatever status the server chose to send them with.
AUTHENTICATION_ERROR_CODES = frozenset(
    {
        "invalid_client",
        "unauthorized_client",
        "invalid_grant",
        "access_denied",
        "insufficient_scope",
        "invalid_token",
        "unauthorized",
    }
)


async def send(
    http_client: httpx.AsyncClient, method: str, url: str, **kwargs: Any
) -> httpx.Response:
    """Send a request, turning transport failures into ``NetworkError``."""
    try:
        return await http_client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        raise NetworkError(f"Request to {url} timed out: {e}", timeout=True) from e
    except httpx.TransportError as e:
        raise NetworkError(f"Request to {url} failed: {e}") from e


def map_response(
    response: httpx.Response,
    model: type[ModelT] | None = None,
    *,
    default_retry_after: float = DEFAULT_RETRY_AFTER,
    now: float | None = None,
) -> ModelT | None:
    """Decode a successful response into ``model`` or raise an ``ApiError``.

    Args:
        response: Response returned by the transport
        model: pydantic model for the success payload, or None when the
            body is ignored (e.g. 204 No Content)
        default_retry_after: Seconds to report for a 429 without any hint
        now: Current Unix time, used to resolve absolute retry hints

    Raises:
        ApiError: The subclass matching the response
    """
    if response.is_success:
        if model is None:
            return None
        try:
            return model.model_validate(response.json())
        except PydanticValidationError as e:
            # Not chained: the pydantic error embeds the raw body
            raise DeserializationError(
                f"Failed to decode {model.__name__} from response: {_summarize(e)}"
            ) from None
        except ValueError as e:
            raise DeserializationError(
                f"Failed to decode {model.__name__} from response: {e}"
            ) from e

    error = error_from_response(
        response, default_retry_after=default_retry_after, now=now
    )
    logger.warning(
        f"{_describe(response)} failed with {response.status_code}: "
        f"{type(error).__name__}"
    )
    raise error


def map_text_response(
    response: httpx.Response, *, default_retry_after: float = DEFAULT_RETRY_AFTER
) -> str:
    """Return the plain-text body of a successful response or raise."""
    if response.is_success:
        return response.text
    raise error_from_response(response, default_retry_after=default_retry_after)


def error_from_response(
    response: httpx.Response,
    *,
    default_retry_after: float = DEFAULT_RETRY_AFTER,
    now: float | None = None,
) -> ApiError:
    """Build the ``ApiError`` for a non-2xx response."""
    status = response.status_code
    body = _decode_error_body(response)
    code = _error_code(body)
    description = _error_description(body)

    if status == 429:
        return RateLimitedError(
            parse_retry_after(response, body, default=default_retry_after, now=now)
        )

    if status in (401, 403) or (
        400 <= status < 500 and code in AUTHENTICATION_ERROR_CODES
    ):
        reason = description or code or response.reason_phrase or str(status)
        return AuthenticationError(reason, status=status, code=code)

    if status in (400, 422):
        field_errors = _field_errors(body)
        if field_errors:
            return ValidationError(field_errors)
        if description:
            return ValidationError([FieldError("request", description)])
        if status == 422:
            return ValidationError([FieldError("request", response.reason_phrase)])

    return ServerError(status, response.text)


def parse_retry_after(
    response: httpx.Response,
    body: dict[str, Any] | None = None,
    *,
    default: float = DEFAULT_RETRY_AFTER,
    now: float | None = None,
) -> float:
    """Seconds to wait before retrying a rate limited request.

    Checks ``Retry-After`` (delta-seconds or HTTP date), then
    ``X-RateLimit-Reset`` (Unix time), then a ``retry_after`` body field.
    """
    if now is None:
        now = time.time()

    retry_after = response.headers.get("Retry-After")
    if retry_after:
        try:
            return max(0.0, float(retry_after))
        except ValueError:
            pass
        try:
            return max(0.0, parsedate_to_datetime(retry_after).timestamp() - now)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring unparseable Retry-After: {retry_after!r}")

    reset = response.headers.get("X-RateLimit-Reset")
    if reset:
        try:
            return max(0.0, float(reset) - now)
        except ValueError:
            logger.debug(f"Ignoring unparseable X-RateLimit-Reset: {reset!r}")

    if body and isinstance(body.get("retry_after"), (int, float)):
        return max(0.0, float(body["retry_after"]))

    return default


def _decode_error_body(response: httpx.Response) -> dict[str, Any] | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _error_code(body: dict[str, Any] | None) -> str | None:
    if not body:
        return None
    # Management API bodies carry a machine code in errorCode and the HTTP
    # reason in error; OAuth bodies carry the machine code in error.
    code = body.get("errorCode") or body.get("error")
    return code if isinstance(code, str) else None


def _error_description(body: dict[str, Any] | None) -> str | None:
    if not body:
        return None
    for key in ("error_description", "message", "description"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _field_errors(body: dict[str, Any] | None) -> list[FieldError]:
    if not body:
        return []
    errors = body.get("errors")
    if isinstance(errors, dict):
        return [FieldError(str(k), str(v)) for k, v in errors.items()]
    if not isinstance(errors, list):
        return []

    field_errors = []
    for item in errors:
        if not isinstance(item, dict):
            continue
        field = item.get("field") or item.get("path") or "request"
        message = item.get("message") or item.get("description") or "invalid"
        field_errors.append(FieldError(str(field), str(message)))
    return field_errors


def _describe(response: httpx.Response) -> str:
    try:
        request = response.request
    except RuntimeError:
        return "Request"
    return f"{request.method} {request.url.path}"


def _summarize(error: PydanticValidationError) -> str:
    problems = []
    for item in error.errors(include_input=False, include_url=False):
        location = ".".join(str(part) for part in item["loc"]) or "body"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)
