"""User model: the authentication identity of the blog."""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import Enum, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from blog_api.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .post import Post
    from .refresh_token import RefreshToken


class Role(str, enum.Enum):
    """Authorization role carried in access tokens."""

    USER = "user"
    ADMIN = "admin"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    username : str
        Public handle, unique, 3–30 chars of ``[A-Za-z0-9_]``.
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    password_hash : str
        Output of the credential hasher; never plaintext.
    role : Role
        ``user`` unless promoted by an administrative action.
    created_at / updated_at : datetime
        Timestamps (from mixin).
    """

    __tablename__ = "users"
    __repr_fields__ = ("username", "role")

    # Columns
    username: Mapped[str] = mapped_column(String(30), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.USER,
        server_default=Role.USER.value,
    )

    # Relationships
    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    posts: Mapped[list[Post]] = relationship(back_populates="author")

    # Constraints
    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        UniqueConstraint("email", name="uq_users_email"),
    )

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always; hashing happens in the credential hasher.
        """
        raise AttributeError("Password is write-only; store a digest in password_hash.")

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """Lowercase and trim the email (format checks live in the service layer)."""
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Email is required.")
        return value.strip().lower()

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """Trim the username."""
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        return value.strip()
