"""PKCE (Proof Key for Code Exchange) generation.

Implements RFC 7636 with the S256 method, which the token endpoint checks
against the verifier sent during the code exchange.
"""

from __future__ import annotations

import base64
import hashlib
import re
import secrets
from dataclasses import dataclass, field

# RFC 7636 Section 4.1 recommends 32 octets, which base64url-encodes to 43 chars.
VERIFIER_ENTROPY_BYTES = 32

_VERIFIER_PATTERN = re.compile(r"[A-Za-z0-9\-._~]{43,128}")


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def s256_challenge(code_verifier: str) -> str:
    """Derive the S256 challenge; a pure function of the verifier.

    Raises:
        ValueError: If the verifier is not 43-128 unreserved characters
    """
    if not _VERIFIER_PATTERN.fullmatch(code_verifier):
        raise ValueError("code_verifier must be 43-128 unreserved characters")
    return _b64url(hashlib.sha256(code_verifier.encode("ascii")).digest())


@dataclass(frozen=True)
class PKCEParameters:
    """Verifier and challenge for one authorization code flow.

    The verifier stays with the caller until the code exchange; only the
    challenge leaves the process, in the authorization URL. Construction
    fails unless the challenge is the S256 digest of the verifier.
    """

    code_verifier: str = field(repr=False)
    code_challenge: str
    code_challenge_method: str = "S256"

    def __post_init__(self) -> None:
        if self.code_challenge_method != "S256":
            raise ValueError(
                f"Unsupported code_challenge_method: {self.code_challenge_method}"
            )
        if not secrets.compare_digest(
            s256_challenge(self.code_verifier).encode(), self.code_challenge.encode()
        ):
            raise ValueError("code_challenge does not match code_verifier")


class PKCEManager:
    """Generates PKCE verifier/challenge pairs.

    - Verifier: ``entropy_bytes`` from ``secrets``, base64url without padding
    - Challenge: BASE64URL-ENCODE(SHA256(ASCII(code_verifier)))
    """

    def __init__(self, entropy_bytes: int = VERIFIER_ENTROPY_BYTES):
        if not 32 <= entropy_bytes <= 96:
            raise ValueError("entropy_bytes must be between 32 and 96")
        self.entropy_bytes = entropy_bytes

    def generate(self) -> PKCEParameters:
        """Generate a fresh verifier and its S256 challenge."""
        code_verifier = self.generate_code_verifier()
        return PKCEParameters(
            code_verifier=code_verifier,
            code_challenge=self.compute_challenge(code_verifier),
        )

    def generate_code_verifier(self) -> str:
        return _b64url(secrets.token_bytes(self.entropy_bytes))

    @staticmethod
    def compute_challenge(code_verifier: str) -> str:
        return s256_challenge(code_verifier)
