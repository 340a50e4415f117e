"""Tests for the Post model."""

from __future__ import annotations

import pytest

from blog_api.models.post import Post
from tests.factories.user import UserFactory


class TestPost:
    def test_text_is_trimmed_and_timestamps_set(self, session):
        author = UserFactory()
        p = Post(title="  Hello  ", content=" Body ", author=author)
        session.add(p)
        session.commit()

        assert p.title == "Hello"
        assert p.content == "Body"
        assert p.created_at is not None
        assert p in author.posts

    @pytest.mark.parametrize("field", ["title", "content"])
    def test_empty_text_rejected(self, field):
        kwargs = {"title": "t", "content": "c", field: ""}
        with pytest.raises(ValueError):
            Post(**kwargs)
