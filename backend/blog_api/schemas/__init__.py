"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    SessionInfoSchema,
    SessionResponseSchema,
    UserPublicSchema,
)
from .common import MetaSchema, PaginationQuerySchema
from .post import PostSchema, PostWriteSchema

__all__ = [
    "LoginSchema",
    "LogoutSchema",
    "RefreshSchema",
    "RegisterSchema",
    "SessionInfoSchema",
    "SessionResponseSchema",
    "UserPublicSchema",
    "MetaSchema",
    "PaginationQuerySchema",
    "PostSchema",
    "PostWriteSchema",
]
