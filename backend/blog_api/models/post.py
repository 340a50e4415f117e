"""Blog post model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from blog_api.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User


class Post(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """A post owned by its author (``author_id``)."""

    __tablename__ = "posts"
    __repr_fields__ = ("author_id",)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    author: Mapped[User] = relationship(back_populates="posts")

    __table_args__ = (Index("ix_posts_author_id", "author_id"),)

    @validates("title", "content")
    def _require_text(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key.capitalize()} is required.")
        return value.strip()
