"""Random secret generation and comparison helpers."""

from __future__ import annotations

import secrets
import string

from auth0_admin.models.errors import StateMismatchError

PASSWORD_LENGTH = 64
PASSWORD_ALPHABET = string.ascii_letters + string.digits


def random_password(length: int = PASSWORD_LENGTH) -> str:
    """Generate a cryptographically secure random password.

    Used for database users created without a caller-supplied password.
    """
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def generate_state() -> str:
    """Generate the unguessable ``state`` parameter for CSRF protection."""
    alphabet = string.ascii_letters + string.digits + "-._~"
    return "".join(secrets.choice(alphabet) for _ in range(32))


def validate_state(expected: str, actual: str | None) -> None:
    """Compare callback state against the one we sent, in constant time.

    Raises:
        StateMismatchError: If the state is missing or different
    """
    if actual is None:
        raise StateMismatchError("Authorization callback missing state parameter")
    if not secrets.compare_digest(expected.encode(), actual.encode()):
        raise StateMismatchError("State parameter mismatch - possible CSRF attack")
