"""Unit tests for the UserResolver."""

from space_migrator.constants import APPLICATION_PRINCIPAL_CLASS
from space_migrator.core.config import MigrationConfig
from space_migrator.services.user_resolver import UserResolver
from tests.unit.conftest import make_message


class TestGetMember:
    """Tests for exact email lookup."""

    def test_found(self, user_resolver):
        assert user_resolver.get_member("bob@example.com")["id"] == "u-bob"

    def test_not_found(self, user_resolver):
        assert user_resolver.get_member("carol@example.com") is None

    def test_users_without_mail_are_not_indexed(self, user_resolver):
        assert len(user_resolver) == 3
        assert user_resolver.get_member("") is None

    def test_lookup_is_case_sensitive(self, user_resolver):
        assert user_resolver.get_member("Alice@Example.com") is None


class TestResolveAuthor:
    """Tests for resolving message authors."""

    def test_author_email_resolves(self, user_resolver):
        member = user_resolver.resolve_author(make_message("alice@example.com"))
        assert member["id"] == "u-alice"

    def test_any_of_several_emails_resolves(self, user_resolver):
        message = make_message()
        message["author"]["details"]["user"]["emails"] = [
            {"email": "old@example.com"},
            {"email": "bob@example.com"},
        ]

        assert user_resolver.resolve_author(message)["id"] == "u-bob"

    def test_unknown_author_is_tracked(self, user_resolver):
        message = make_message("carol@example.com", name="carol")

        assert user_resolver.resolve_author(message, "eng-backend") is None
        assert user_resolver.resolve_author(message, "eng-backend") is None
        assert user_resolver.unresolved_authors == {"carol": 2}

    def test_deleted_author_uses_fallback_member(self, user_resolver):
        message = make_message(email=None, name="deleted")

        assert user_resolver.resolve_author(message)["id"] == "u-admin"
        assert user_resolver.unresolved_authors == {}

    def test_deleted_author_without_fallback_is_unresolved(self, sample_users):
        resolver = UserResolver(sample_users, MigrationConfig())

        assert resolver.resolve_author(make_message(email=None, name="deleted")) is None
        assert resolver.unresolved_authors == {"deleted": 1}

    def test_author_without_details_is_unresolved(self, user_resolver):
        message = make_message(email=None, name="ghost")

        assert user_resolver.resolve_author(message) is None
        assert user_resolver.unresolved_authors == {"ghost": 1}


class TestIsSystemAuthor:
    """Tests for system principal detection."""

    def test_application_is_system(self, user_resolver):
        message = make_message(class_name=APPLICATION_PRINCIPAL_CLASS)
        assert user_resolver.is_system_author(message)

    def test_user_is_not_system(self, user_resolver):
        assert not user_resolver.is_system_author(make_message())

    def test_author_without_details_is_not_system(self, user_resolver):
        assert not user_resolver.is_system_author(make_message(email=None))

    def test_configured_classes(self, sample_users):
        resolver = UserResolver(
            sample_users, MigrationConfig(system_author_classes=["CBotDetails"])
        )

        assert resolver.is_system_author(make_message(class_name="CBotDetails"))
        assert not resolver.is_system_author(
            make_message(class_name=APPLICATION_PRINCIPAL_CLASS)
        )
