"""Shared staging and validation helpers for request builders.

Builders collect fields through chained setters and validate everything in
``build()``, reporting every problem at once rather than the first one.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

from auth0_admin.models.errors import FieldError, ValidationError

METADATA_MAX_PAIRS = 25
METADATA_MAX_LENGTH = 255

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})")
_EMAIL = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
_E164 = re.compile(r"\+[1-9]\d{6,14}")


class RequestBuilder:
    """Mutable staging area consumed by a single ``build()`` call."""

    def __init__(self) -> None:
        self._consumed = False

    def _check_open(self) -> None:
        if self._consumed:
            raise RuntimeError(f"{type(self).__name__} has already been built")

    def _consume(self, errors: list[FieldError]) -> None:
        """Mark the builder used and raise if validation found problems."""
        self._check_open()
        self._consumed = True
        if errors:
            raise ValidationError(errors)


def is_hex_color(value: str) -> bool:
    return bool(_HEX_COLOR.fullmatch(value))


def is_email(value: str) -> bool:
    return bool(_EMAIL.fullmatch(value))


def is_e164(value: str) -> bool:
    return bool(_E164.fullmatch(value))


def is_url(value: str, schemes: tuple[str, ...] = ("https",)) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in schemes and bool(parsed.netloc)


def require_text(errors: list[FieldError], field: str, value: str | None) -> None:
    if value is None:
        errors.append(FieldError(field, "is required"))
    elif not value.strip():
        errors.append(FieldError(field, "cannot be empty"))


def check_string_metadata(
    errors: list[FieldError], field: str, metadata: Mapping[str, Any]
) -> None:
    """Organization metadata: at most 25 string pairs of 255 chars each."""
    if len(metadata) > METADATA_MAX_PAIRS:
        errors.append(
            FieldError(field, f"cannot have more than {METADATA_MAX_PAIRS} entries")
        )
    for key, value in metadata.items():
        if not isinstance(key, str) or not key:
            errors.append(FieldError(field, f"invalid key {key!r}"))
        elif len(key) > METADATA_MAX_LENGTH:
            errors.append(FieldError(f"{field}.{key[:20]}", "key is too long"))
        if not isinstance(value, str):
            errors.append(FieldError(f"{field}.{key}", "value must be a string"))
        elif len(value) > METADATA_MAX_LENGTH:
            errors.append(FieldError(f"{field}.{key}", "value is too long"))


def check_json_object(errors: list[FieldError], field: str, value: Any) -> None:
    if not isinstance(value, Mapping):
        errors.append(FieldError(field, "must be a JSON object"))
        return
    for key in value:
        if not isinstance(key, str):
            errors.append(FieldError(field, f"keys must be strings, got {key!r}"))
