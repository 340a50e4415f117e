"""Repository package exposing persistence-layer access for all models."""

from __future__ import annotations

from blog_api.repositories.base import BaseRepository
from blog_api.repositories.post import PostRepository
from blog_api.repositories.refresh_token import RefreshTokenRepository
from blog_api.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "PostRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
