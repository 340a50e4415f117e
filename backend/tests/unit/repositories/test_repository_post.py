"""Unit tests for PostRepository listing helpers."""

import pytest

from blog_api.repositories.post import PostRepository
from tests.factories.post import PostFactory
from tests.factories.user import UserFactory


class TestPostRepository:
    @pytest.fixture()
    def repo(self, session):
        return PostRepository(session=session)

    def test_list_sorts_by_whitelisted_fields(self, repo, session):
        author = UserFactory()
        PostFactory(author=author, title="b")
        PostFactory(author=author, title="a")
        PostFactory(author=author, title="c")

        titles = [p.title for p in repo.list(sort=["title"])]
        assert titles == ["a", "b", "c"]

    def test_unknown_sort_tokens_are_ignored(self, repo, session):
        first = PostFactory()
        second = PostFactory()

        rows = repo.list(sort=["password_hash"])
        assert [r.id for r in rows] == [first.id, second.id]

    def test_count_and_filter_by_author(self, repo, session):
        author = UserFactory()
        PostFactory(author=author)
        PostFactory(author=author)
        PostFactory()

        assert repo.count({"author_id": author.id}) == 2
        assert repo.count() == 3
        assert len(repo.list(filters={"author_id": author.id}, limit=1)) == 1

    def test_empty_title_is_rejected(self, session):
        with pytest.raises(ValueError):
            PostFactory(title="   ")
