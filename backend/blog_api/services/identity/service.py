"""
IdentityService
===============

Access to the ``User`` aggregate outside the session flow:

- Profile reads for authenticated callers.
- Administrative creation of ``admin`` accounts.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from blog_api.models.user import Role, User
from blog_api.repositories.user import UserRepository
from blog_api.services._shared.base import BaseService
from blog_api.services._shared.clock import as_utc
from blog_api.services._shared.errors import DuplicateIdentityError, NotFoundError, StoreError
from blog_api.services.identity.dto import UserPublicOut


def to_user_public(user) -> UserPublicOut:
    """
    Map ORM ``User`` to :class:`UserPublicOut`.

    :param user: ORM user instance.
    :type user: :class:`blog_api.models.user.User`
    :returns: Public-safe DTO.
    :rtype: :class:`UserPublicOut`
    """
    role = getattr(user.role, "value", user.role)
    return UserPublicOut(
        id=user.id,
        username=user.username,
        email=user.email,
        role=str(role),
        created_at=as_utc(user.created_at) if user.created_at else None,
    )


class IdentityService(BaseService):
    """Application service for the ``User`` aggregate (profile reads, admin creation)."""

    def get_user(self, user_id: int) -> UserPublicOut:
        """
        Fetch a user by id.

        :param user_id: User identifier.
        :returns: Public-safe user DTO.
        :raises NotFoundError: If the user does not exist.
        """
        try:
            with self.ro_uow() as uow:
                user = uow.users.get(user_id)
                if user is None:
                    raise NotFoundError("User", user_id)
                return to_user_public(user)
        except SQLAlchemyError as exc:
            raise StoreError() from exc

    def me(self) -> UserPublicOut:
        """Return the user bound to the current service context."""
        if self.ctx.actor_id is None:
            raise NotFoundError("User", "anonymous")
        return self.get_user(self.ctx.actor_id)

    def create_admin(self, *, username: str, email: str, password_hash: str) -> UserPublicOut:
        """
        Create an ``admin`` user; the only path to the elevated role.

        :param username: Public handle (already validated).
        :param email: Email (already validated).
        :param password_hash: Digest produced by the credential hasher.
        :raises DuplicateIdentityError: If the username or email is taken.
        """
        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                if repo.exists_by_username_or_email(username, email):
                    raise DuplicateIdentityError()
                user = repo.add(
                    User(
                        username=username,
                        email=email,
                        password_hash=password_hash,
                        role=Role.ADMIN,
                    )
                )
                return to_user_public(user)
        except IntegrityError as exc:
            raise DuplicateIdentityError() from exc
        except SQLAlchemyError as exc:
            raise StoreError() from exc
