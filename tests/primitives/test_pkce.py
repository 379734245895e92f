import base64
import hashlib

import pytest

from auth0_admin.primitives.pkce import PKCEManager, PKCEParameters

# RFC 7636 Appendix B
RFC_VERIFIER = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
RFC_CHALLENGE = "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


class TestPKCEManager:
    def test_generate_crypto_requirements(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act
        params = pkce_manager.generate()

        # Assert
        assert len(params.code_verifier) == 43
        assert "=" not in params.code_verifier
        assert params.code_challenge_method == "S256"

        expected_challenge = (
            base64.urlsafe_b64encode(
                hashlib.sha256(params.code_verifier.encode("ascii")).digest()
            )
            .decode("ascii")
            .rstrip("=")
        )
        assert params.code_challenge == expected_challenge

    def test_challenge_matches_rfc_vector(self) -> None:
        assert PKCEManager.compute_challenge(RFC_VERIFIER) == RFC_CHALLENGE

    def test_challenge_is_deterministic(self) -> None:
        # Act
        first = PKCEManager.compute_challenge(RFC_VERIFIER)
        second = PKCEManager.compute_challenge(RFC_VERIFIER)

        # Assert
        assert first == second

    def test_verifiers_do_not_collide(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act
        verifiers = {pkce_manager.generate_code_verifier() for _ in range(10_000)}

        # Assert
        assert len(verifiers) == 10_000

    def test_larger_entropy_gives_longer_verifier(self) -> None:
        params = PKCEManager(entropy_bytes=96).generate()
        assert len(params.code_verifier) == 128

    @pytest.mark.parametrize("entropy_bytes", [16, 31, 97])
    def test_entropy_out_of_range_rejected(self, entropy_bytes) -> None:
        with pytest.raises(ValueError):
            PKCEManager(entropy_bytes=entropy_bytes)

    @pytest.mark.parametrize("verifier", ["short", "a" * 129, "x" * 42 + "!"])
    def test_invalid_verifier_rejected(self, verifier) -> None:
        with pytest.raises(ValueError):
            PKCEManager.compute_challenge(verifier)

    def test_verifier_hidden_from_repr(self) -> None:
        params = PKCEManager().generate()
        assert params.code_verifier not in repr(params)


class TestPKCEParameters:
    def test_matching_pair_accepted(self) -> None:
        params = PKCEParameters(
            code_verifier=RFC_VERIFIER, code_challenge=RFC_CHALLENGE
        )
        assert params.code_challenge_method == "S256"

    def test_plain_method_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unsupported"):
            PKCEParameters(
                code_verifier=RFC_VERIFIER,
                code_challenge=RFC_VERIFIER,
                code_challenge_method="plain",
            )

    def test_challenge_must_match_verifier(self) -> None:
        # Arrange
        other = PKCEManager().generate()

        # Act & Assert
        with pytest.raises(ValueError, match="does not match"):
            PKCEParameters(
                code_verifier=RFC_VERIFIER, code_challenge=other.code_challenge
            )

    def test_malformed_verifier_rejected(self) -> None:
        with pytest.raises(ValueError):
            PKCEParameters(code_verifier="short", code_challenge=RFC_CHALLENGE)
