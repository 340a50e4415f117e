"""Post repository."""

from __future__ import annotations

from blog_api.models.post import Post
from blog_api.repositories.base import BaseRepository


class PostRepository(BaseRepository[Post]):
    """Persistence-only repository for :class:`Post`."""

    model = Post

    def _sortable_fields(self):
        return {
            "created_at": Post.created_at,
            "updated_at": Post.updated_at,
            "title": Post.title,
        }

    def _filterable_fields(self):
        return {"author_id": Post.author_id}

    def _updatable_fields(self):
        return {"title", "content"}
