"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`blog_api.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``blog_api.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Shared DTOs (from ``blog_api.services._shared.dto``)
    * :class:`PaginationIn`
    * :class:`PageMeta`

- Session service (from ``blog_api.services.sessions``)
    * :class:`SessionService`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`RefreshIn`,
      :class:`LogoutIn`, :class:`SessionOut`

- Identity service (from ``blog_api.services.identity``)
    * :class:`IdentityService`
    * DTOs: :class:`UserPublicOut`

- Post service (from ``blog_api.services.posts``)
    * :class:`PostService`
    * DTOs: :class:`PostCreateIn`, :class:`PostUpdateIn`, :class:`PostListIn`,
      :class:`PostOut`, :class:`PostListOut`
"""

from __future__ import annotations

# Base primitives (service base + request-scoped context)
from ._shared.base import BaseService, ServiceContext

# Shared DTOs (compose these in endpoint-specific DTOs)
from ._shared.dto import PageMeta, PaginationIn

# Identity service + DTOs
from .identity.dto import UserPublicOut
from .identity.service import IdentityService

# Post service + DTOs
from .posts.dto import PostCreateIn, PostListIn, PostListOut, PostOut, PostUpdateIn
from .posts.service import PostService

# Session service + DTOs
from .sessions.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn, SessionOut
from .sessions.service import SessionService

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Shared DTOs
    "PaginationIn",
    "PageMeta",
    # Identity
    "IdentityService",
    "UserPublicOut",
    # Posts
    "PostService",
    "PostCreateIn",
    "PostUpdateIn",
    "PostListIn",
    "PostOut",
    "PostListOut",
    # Sessions
    "SessionService",
    "RegisterIn",
    "LoginIn",
    "RefreshIn",
    "LogoutIn",
    "SessionOut",
]
