"""Unit of Work contract shared by the writer and read-only scopes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from blog_api.repositories import PostRepository, RefreshTokenRepository, UserRepository


class UnitOfWork(ABC):
    """
    Transaction scope handing out repositories bound to one session.

    Services only enter a scope and call repositories through it; whether
    the scope persists its changes is decided by the concrete class.
    """

    users: UserRepository
    refresh_tokens: RefreshTokenRepository
    posts: PostRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None:
        """Persist pending changes (writer scopes only)."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard pending changes."""
