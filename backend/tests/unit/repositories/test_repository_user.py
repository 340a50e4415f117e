"""Unit tests for UserRepository."""

import pytest

from blog_api.repositories.user import UserRepository
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs the lookups the session flow needs."""

    @pytest.fixture()
    def repo(self, session):
        return UserRepository(session=session)

    def test_add_and_get_user(self, repo, session):
        u = repo.add(UserFactory.build(username="alice", email="alice@example.com"))
        session.commit()

        fetched = repo.get(u.id)
        assert fetched is not None
        assert fetched.username == "alice"

    @pytest.mark.parametrize("login", ["bob", "bob@example.com", "BOB@Example.com", " bob "])
    def test_find_by_username_or_email(self, repo, session, login):
        u = UserFactory(username="bob", email="bob@example.com")
        session.commit()

        assert repo.find_by_username_or_email(login).id == u.id

    def test_find_unknown_or_blank_returns_none(self, repo, session):
        UserFactory(username="carol")
        assert repo.find_by_username_or_email("nobody") is None
        assert repo.find_by_username_or_email("   ") is None

    def test_exists_by_username_or_email(self, repo, session):
        UserFactory(username="dave", email="dave@example.com")

        assert repo.exists_by_username_or_email("dave", "new@example.com")
        assert repo.exists_by_username_or_email("other", "DAVE@example.com")
        assert not repo.exists_by_username_or_email("other", "other@example.com")

    def test_email_is_normalized_on_assignment(self, repo, session):
        u = UserFactory(email="  Mixed@Example.COM ")
        assert u.email == "mixed@example.com"

    def test_update_rejects_non_whitelisted_fields(self, repo, session):
        u = UserFactory()
        with pytest.raises(ValueError):
            repo.update(u, username="renamed")
