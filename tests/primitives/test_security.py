import pytest

from auth0_admin.models.errors import StateMismatchError
from auth0_admin.primitives.security import (
    PASSWORD_ALPHABET,
    generate_state,
    random_password,
    validate_state,
)


class TestRandomPassword:
    def test_default_length_and_alphabet(self):
        # Act
        password = random_password()

        # Assert
        assert len(password) == 64
        assert set(password) <= set(PASSWORD_ALPHABET)

    def test_passwords_are_unique(self):
        assert len({random_password() for _ in range(100)}) == 100

    def test_custom_length(self):
        assert len(random_password(16)) == 16


class TestState:
    def test_generate_state(self):
        state = generate_state()
        assert len(state) == 32
        assert generate_state() != state

    def test_matching_state_passes(self):
        validate_state("abc123", "abc123")

    def test_mismatched_state_raises(self):
        with pytest.raises(StateMismatchError, match="mismatch"):
            validate_state("abc123", "evil")

    def test_missing_state_raises(self):
        with pytest.raises(StateMismatchError, match="missing"):
            validate_state("abc123", None)

    def test_non_ascii_state_raises_mismatch(self):
        with pytest.raises(StateMismatchError):
            validate_state("abc123", "abé123")
