# comments in English; strict reST docstrings
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from blog_api.models.post import Post
from blog_api.repositories.post import PostRepository
from blog_api.services._shared.base import BaseService
from blog_api.services._shared.clock import as_utc
from blog_api.services._shared.dto import PageMeta
from blog_api.services._shared.errors import (
    NotFoundError,
    StoreError,
    UnauthorizedError,
    ValidationError,
)
from blog_api.services.posts.dto import (
    PostCreateIn,
    PostListIn,
    PostListOut,
    PostOut,
    PostUpdateIn,
)

logger = logging.getLogger(__name__)

TITLE_MAX = 200
DEFAULT_SORT = ("-created_at",)
MAX_LIMIT = 100


def _validate(title: str, content: str) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    if not title.strip():
        errors["title"] = ["Must not be empty."]
    elif len(title.strip()) > TITLE_MAX:
        errors["title"] = [f"Must be at most {TITLE_MAX} characters."]
    if not content.strip():
        errors["content"] = ["Must not be empty."]
    return errors


class PostService(BaseService):
    """
    Application service for blog posts.

    Responsibilities
    ----------------
    - Public reads (list/get).
    - Authenticated writes; update/delete allowed to the owner or an admin.

    Notes
    -----
    - The acting user comes from :class:`ServiceContext` (``actor_id``/``role``).
    - Ownership checks run inside the write transaction against the stored row.
    """

    # ------------------------------------------------------------------ #
    # Read
    # ------------------------------------------------------------------ #

    def get(self, post_id: int) -> PostOut:
        """
        Retrieve a single post.

        :raises NotFoundError: If the post does not exist.
        """
        try:
            with self.ro_uow() as uow:
                row = uow.posts.get(post_id)
                if row is None:
                    raise NotFoundError("Post", post_id)
                return self._to_out(row)
        except SQLAlchemyError as exc:
            raise StoreError() from exc

    def list(self, dto: PostListIn) -> PostListOut:
        """
        List posts with pagination; newest first by default.

        :param dto: Listing DTO.
        :returns: Items plus page metadata.
        """
        page, limit = dto.pagination.clamped(MAX_LIMIT)
        sort = list(dto.pagination.sort or DEFAULT_SORT)
        filters = {"author_id": dto.author_id} if dto.author_id is not None else None
        try:
            with self.ro_uow() as uow:
                repo: PostRepository = uow.posts
                total = repo.count(filters)
                rows = repo.list(
                    filters=filters, sort=sort, limit=limit, offset=(page - 1) * limit
                )
                items = [self._to_out(r) for r in rows]
        except SQLAlchemyError as exc:
            raise StoreError() from exc
        return PostListOut(
            items=items,
            meta=PageMeta.of(page=page, limit=limit, total=total),
        )

    # ------------------------------------------------------------------ #
    # Write
    # ------------------------------------------------------------------ #

    def create(self, dto: PostCreateIn) -> PostOut:
        """
        Create a post owned by the acting user.

        :raises UnauthorizedError: Without an acting user.
        :raises ValidationError: On empty or oversized fields.
        """
        author_id = self._require_actor()
        errors = _validate(dto.title or "", dto.content or "")
        if errors:
            raise ValidationError(errors)
        try:
            with self.rw_uow() as uow:
                row = uow.posts.add(
                    Post(title=dto.title, content=dto.content, author_id=author_id)
                )
                out = self._to_out(row)
        except SQLAlchemyError as exc:
            raise StoreError() from exc
        logger.info("Post created", extra={"event": "post_create", "user_id": author_id})
        return out

    def update(self, dto: PostUpdateIn) -> PostOut:
        """
        Replace title and content.

        :raises NotFoundError: If the post does not exist.
        :raises AuthorizationError: If the actor is neither owner nor admin.
        """
        self._require_actor()
        errors = _validate(dto.title or "", dto.content or "")
        if errors:
            raise ValidationError(errors)
        try:
            with self.rw_uow() as uow:
                repo: PostRepository = uow.posts
                row = repo.get(dto.post_id)
                if row is None:
                    raise NotFoundError("Post", dto.post_id)
                self.ensure_can_modify(row.author_id)
                repo.update(row, title=dto.title, content=dto.content)
                return self._to_out(row)
        except SQLAlchemyError as exc:
            raise StoreError() from exc

    def delete(self, post_id: int) -> None:
        """
        Delete a post.

        :raises NotFoundError: If the post does not exist.
        :raises AuthorizationError: If the actor is neither owner nor admin.
        """
        actor_id = self._require_actor()
        try:
            with self.rw_uow() as uow:
                repo: PostRepository = uow.posts
                row = repo.get(post_id)
                if row is None:
                    raise NotFoundError("Post", post_id)
                self.ensure_can_modify(row.author_id)
                repo.delete(row)
        except SQLAlchemyError as exc:
            raise StoreError() from exc
        logger.info("Post deleted", extra={"event": "post_delete", "user_id": actor_id})

    # ------------------------------------------------------------------ #
    # Mapping
    # ------------------------------------------------------------------ #

    def _require_actor(self) -> int:
        if self.ctx.actor_id is None:
            raise UnauthorizedError()
        return self.ctx.actor_id

    @staticmethod
    def _to_out(row: Post) -> PostOut:
        return PostOut(
            id=row.id,
            title=row.title,
            content=row.content,
            author_id=row.author_id,
            author_name=row.author.username if row.author is not None else None,
            created_at=as_utc(row.created_at) if row.created_at else None,
            updated_at=as_utc(row.updated_at) if row.updated_at else None,
        )
