import pytest

from auth0_admin.builders.users import UserCreateBuilder
from auth0_admin.models.errors import ValidationError
from auth0_admin.models.users import ConnectionStrategy
from auth0_admin.primitives.security import PASSWORD_ALPHABET


class TestDatabaseUsers:
    def test_generates_password_when_missing(self):
        # Act
        request = (
            UserCreateBuilder()
            .connection("Username-Password-Authentication")
            .email("jane@example.com")
            .build()
        )

        # Assert
        payload = request.to_payload()
        assert len(payload["password"]) == 64
        assert set(payload["password"]) <= set(PASSWORD_ALPHABET)
        assert payload["connection"] == "Username-Password-Authentication"
        assert "strategy" not in payload

    def test_supplied_password_is_sent_but_redacted(self):
        # Act
        request = (
            UserCreateBuilder()
            .connection("db")
            .email("jane@example.com")
            .password("Correct-Horse-42")
            .given_name("Jane")
            .user_metadata({"plan": "pro"})
            .build()
        )

        # Assert
        assert request.to_payload()["password"] == "Correct-Horse-42"
        assert "Correct-Horse-42" not in repr(request)
        assert "Correct-Horse-42" not in request.model_dump_json()
        assert request.to_payload()["user_metadata"] == {"plan": "pro"}

    def test_email_required(self):
        with pytest.raises(ValidationError) as exc_info:
            UserCreateBuilder().connection("db").build()
        assert exc_info.value.fields == ["email"]

    def test_all_problems_reported_together(self):
        # Arrange
        builder = (
            UserCreateBuilder()
            .email("not-an-email")
            .phone_verified()
            .picture("http://example.com/me.png")
            .app_metadata(["not", "an", "object"])
        )

        # Act
        with pytest.raises(ValidationError) as exc_info:
            builder.build()

        # Assert
        assert exc_info.value.fields == [
            "connection",
            "email",
            "phone_verified",
            "picture",
            "app_metadata",
        ]

    def test_verify_email_conflicts_with_verified_email(self):
        builder = (
            UserCreateBuilder()
            .connection("db")
            .email("jane@example.com")
            .email_verified()
            .verify_email()
        )
        with pytest.raises(ValidationError) as exc_info:
            builder.build()
        assert exc_info.value.fields == ["verify_email"]


class TestPasswordlessUsers:
    def test_sms_user_requires_e164_phone(self):
        # Act
        with pytest.raises(ValidationError) as exc_info:
            UserCreateBuilder().connection("sms", ConnectionStrategy.SMS).build()

        # Assert
        assert exc_info.value.fields == ["phone_number"]

    def test_sms_user_has_no_password(self):
        # Act
        request = (
            UserCreateBuilder()
            .connection("sms", "sms")
            .phone_number("+14155550100")
            .phone_verified()
            .build()
        )

        # Assert
        assert request.password is None
        assert request.to_payload() == {
            "connection": "sms",
            "phone_number": "+14155550100",
            "phone_verified": True,
        }

    def test_password_forbidden_for_email_connection(self):
        builder = (
            UserCreateBuilder()
            .connection("email", ConnectionStrategy.EMAIL)
            .email("jane@example.com")
            .password("secret")
        )
        with pytest.raises(ValidationError) as exc_info:
            builder.build()
        assert exc_info.value.fields == ["password"]

    def test_bad_phone_number(self):
        builder = UserCreateBuilder().connection("sms", "sms").phone_number("555-0100")
        with pytest.raises(ValidationError) as exc_info:
            builder.build()
        assert exc_info.value.fields == ["phone_number"]

    def test_unknown_strategy(self):
        builder = UserCreateBuilder().connection("x", "ldap").email("a@b.co")
        with pytest.raises(ValidationError) as exc_info:
            builder.build()
        assert exc_info.value.fields == ["strategy"]

    def test_builder_cannot_be_reused(self):
        builder = UserCreateBuilder().connection("db").email("jane@example.com")
        builder.build()
        with pytest.raises(RuntimeError):
            builder.email("other@example.com")


class TestPasswordFactory:
    def test_fixed_factory_builds_equal_requests(self):
        # Arrange
        def build():
            return (
                UserCreateBuilder(password_factory=lambda: "P" * 64)
                .connection("db")
                .email("jane@example.com")
                .build()
            )

        # Act
        first, second = build(), build()

        # Assert
        assert first == second
        assert first.password_generated

    def test_generated_flag_is_not_sent(self):
        request = UserCreateBuilder().connection("db").email("jane@example.com").build()
        assert request.password_generated
        assert "password_generated" not in request.to_payload()

    def test_supplied_password_is_not_marked_generated(self):
        request = (
            UserCreateBuilder()
            .connection("db")
            .email("jane@example.com")
            .password("Correct-Horse-42")
            .build()
        )
        assert not request.password_generated

    def test_passwordless_connection_is_not_marked_generated(self):
        builder = UserCreateBuilder().connection("sms", "sms")
        request = builder.phone_number("+14155550100").build()
        assert not request.password_generated
