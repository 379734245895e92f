import pytest

from auth0_admin.builders.organizations import (
    OrganizationCreateBuilder,
    OrganizationMembersBuilder,
    OrganizationPatchBuilder,
)
from auth0_admin.models.errors import ValidationError
from auth0_admin.models.organizations import EnabledConnection


class TestOrganizationCreateBuilder:
    def test_minimal_request(self):
        # Act
        request = OrganizationCreateBuilder().name("acme").display_name("Acme").build()

        # Assert
        assert request.to_payload() == {"name": "acme", "display_name": "Acme"}

    def test_full_request_payload(self):
        # Act
        request = (
            OrganizationCreateBuilder()
            .name("acme-corp")
            .display_name("Acme Corp")
            .branding(
                logo_url="https://cdn.acme.com/logo.png",
                primary="#0059d6",
                page_background="#fff",
            )
            .metadata_entry("tier", "gold")
            .enabled_connection("con_123", assign_membership_on_login=True)
            .build()
        )

        # Assert
        assert request.to_payload() == {
            "name": "acme-corp",
            "display_name": "Acme Corp",
            "branding": {
                "logo_url": "https://cdn.acme.com/logo.png",
                "colors": {"primary": "#0059d6", "page_background": "#fff"},
            },
            "metadata": {"tier": "gold"},
            "enabled_connections": [
                {
                    "connection_id": "con_123",
                    "assign_membership_on_login": True,
                    "show_as_button": True,
                }
            ],
        }

    def test_missing_fields_are_all_reported(self):
        # Act
        with pytest.raises(ValidationError) as exc_info:
            OrganizationCreateBuilder().build()

        # Assert
        assert exc_info.value.fields == ["name", "display_name"]

    def test_invalid_values_are_all_reported(self):
        # Arrange
        builder = (
            OrganizationCreateBuilder()
            .name("Acme Corp")
            .display_name("x" * 256)
            .branding(logo_url="http://insecure.example.com/logo.png", primary="blue")
            .metadata({f"k{i}": "v" for i in range(26)})
            .enabled_connections(
                [
                    EnabledConnection(connection_id="c1"),
                    EnabledConnection(connection_id="c1"),
                ]
            )
        )

        # Act
        with pytest.raises(ValidationError) as exc_info:
            builder.build()

        # Assert
        fields = exc_info.value.fields
        assert "name" in fields
        assert "display_name" in fields
        assert "branding.logo_url" in fields
        assert "branding.colors.primary" in fields
        assert "branding.colors.page_background" in fields
        assert "metadata" in fields
        assert "enabled_connections[1].connection_id" in fields

    def test_identical_inputs_build_equal_requests(self):
        def build():
            return (
                OrganizationCreateBuilder()
                .name("acme")
                .display_name("Acme")
                .metadata({"region": "eu"})
                .build()
            )

        assert build() == build()

    def test_builder_cannot_be_reused(self):
        # Arrange
        builder = OrganizationCreateBuilder().name("acme").display_name("Acme")
        builder.build()

        # Act & Assert
        with pytest.raises(RuntimeError):
            builder.build()
        with pytest.raises(RuntimeError):
            builder.name("other")

    def test_failed_build_also_consumes(self):
        builder = OrganizationCreateBuilder()
        with pytest.raises(ValidationError):
            builder.build()
        with pytest.raises(RuntimeError):
            builder.build()


class TestOrganizationPatchBuilder:
    def test_only_changed_fields_are_sent(self):
        request = OrganizationPatchBuilder().display_name("Acme Renamed").build()
        assert request.to_payload() == {"display_name": "Acme Renamed"}

    def test_empty_patch_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            OrganizationPatchBuilder().build()
        assert exc_info.value.fields == ["request"]

    def test_blank_display_name_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            OrganizationPatchBuilder().display_name("   ").build()
        assert exc_info.value.fields == ["display_name"]

    def test_clearing_metadata_sends_empty_object(self):
        request = OrganizationPatchBuilder().metadata({}).build()
        assert request.to_payload() == {"metadata": {}}


class TestOrganizationMembersBuilder:
    def test_members_are_deduplicated_in_order(self):
        # Act
        request = (
            OrganizationMembersBuilder()
            .member("auth0|2")
            .members(["auth0|1", "auth0|2"])
            .build()
        )

        # Assert
        assert request.to_payload() == {"members": ["auth0|2", "auth0|1"]}

    def test_no_members_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            OrganizationMembersBuilder().build()
        assert exc_info.value.fields == ["members"]

    def test_blank_member_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            OrganizationMembersBuilder().members(["auth0|1", " "]).build()
        assert exc_info.value.fields == ["members[1]"]
