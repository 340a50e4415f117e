"""User repository: the user store consumed by the session core."""

from __future__ import annotations

from typing import cast

from sqlalchemy import func, or_, select

from blog_api.models.user import User
from blog_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It NEVER hashes passwords or issues tokens; only DB-level lookups.
    """

    model = User

    def _sortable_fields(self):
        return {
            "id": User.id,
            "username": User.username,
            "created_at": User.created_at,
        }

    def _filterable_fields(self):
        return {
            "email": User.email,
            "username": User.username,
            "role": User.role,
        }

    def _updatable_fields(self):
        return {"role", "password_hash"}

    def find_by_username_or_email(self, login: str) -> User | None:
        """Fetch a user whose username or (case-insensitive) email equals ``login``.

        :param login: Username or email as typed by the client.
        :returns: User instance or ``None`` when not found.
        """
        value = login.strip()
        if not value:
            return None
        stmt = select(User).where(
            or_(User.username == value, User.email == value.lower())
        )
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_username_or_email(self, username: str, email: str) -> bool:
        """Return ``True`` if either the username or the email is already taken."""
        stmt = select(func.count(User.id)).where(
            or_(User.username == username.strip(), User.email == email.strip().lower())
        )
        return bool(self.session.execute(stmt).scalar())
