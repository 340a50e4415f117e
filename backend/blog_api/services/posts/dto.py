# comments in English; strict reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from blog_api.services._shared.dto import PageMeta, PaginationIn

# ------------------------------ Input DTOs ------------------------------- #


@dataclass(frozen=True, slots=True)
class PostCreateIn:
    """
    Create a post owned by the acting user.

    :param title: Post title (1-200 chars).
    :type title: str
    :param content: Post body.
    :type content: str
    """

    title: str
    content: str


@dataclass(frozen=True, slots=True)
class PostUpdateIn:
    """
    Replace the mutable fields of a post.

    :param post_id: Target post id.
    :type post_id: int
    :param title: New title.
    :type title: str
    :param content: New body.
    :type content: str
    """

    post_id: int
    title: str
    content: str


@dataclass(frozen=True, slots=True)
class PostListIn:
    """
    List posts, newest first unless ``pagination.sort`` says otherwise.

    :param pagination: Page/limit/sort.
    :type pagination: :class:`PaginationIn`
    :param author_id: Optional author filter.
    :type author_id: int | None
    """

    pagination: PaginationIn = PaginationIn()
    author_id: int | None = None


# ------------------------------ Output DTOs ------------------------------ #


@dataclass(frozen=True, slots=True)
class PostOut:
    """
    Public projection of a post.

    :param id: Primary key.
    :param title: Title.
    :param content: Body.
    :param author_id: Owner user id.
    :param author_name: Owner username.
    :param created_at: Creation timestamp.
    :param updated_at: Update timestamp.
    """

    id: int
    title: str
    content: str
    author_id: int
    author_name: str | None
    created_at: datetime | None
    updated_at: datetime | None


@dataclass(frozen=True, slots=True)
class PostListOut:
    """
    A page of posts.

    :param items: Rows on this page.
    :type items: list[PostOut]
    :param meta: Pagination metadata.
    :type meta: :class:`PageMeta`
    """

    items: list[PostOut]
    meta: PageMeta
