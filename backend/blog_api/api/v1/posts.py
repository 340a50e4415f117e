"""Blog post endpoints; writes require a bearer token, changes need owner or admin."""

from __future__ import annotations

from flask import Blueprint, Response, request

from blog_api.api.deps import (
    json_response,
    parse_pagination,
    require_auth,
    service_context,
    timing,
)
from blog_api.schemas import MetaSchema, PostSchema, PostWriteSchema
from blog_api.services.posts.dto import PostCreateIn, PostListIn, PostUpdateIn
from blog_api.services.posts.service import PostService

bp = Blueprint("posts", __name__, url_prefix="/posts")

post_schema = PostSchema()
posts_schema = PostSchema(many=True)
write_schema = PostWriteSchema()
meta_schema = MetaSchema()


@bp.get("")
@timing
def list_posts():
    """List posts, newest first."""

    pagination, author_id = parse_pagination()
    result = PostService(ctx=service_context()).list(
        PostListIn(pagination=pagination, author_id=author_id)
    )
    return json_response(
        {"data": posts_schema.dump(result.items), "meta": meta_schema.dump(result.meta)}
    )


@bp.get("/<int:post_id>")
@timing
def get_post(post_id: int):
    """Return a single post."""

    post = PostService(ctx=service_context()).get(post_id)
    return json_response({"data": post_schema.dump(post)})


@bp.post("")
@require_auth
@timing
def create_post():
    """Create a post owned by the caller."""

    data = write_schema.load(request.get_json(silent=True) or {})
    post = PostService(ctx=service_context()).create(
        PostCreateIn(title=data["title"], content=data["content"])
    )
    return json_response({"data": post_schema.dump(post)}, status=201)


@bp.put("/<int:post_id>")
@require_auth
@timing
def update_post(post_id: int):
    """Replace a post; owner or admin only."""

    data = write_schema.load(request.get_json(silent=True) or {})
    post = PostService(ctx=service_context()).update(
        PostUpdateIn(post_id=post_id, title=data["title"], content=data["content"])
    )
    return json_response({"data": post_schema.dump(post)})


@bp.delete("/<int:post_id>")
@require_auth
@timing
def delete_post(post_id: int):
    """Delete a post; owner or admin only."""

    PostService(ctx=service_context()).delete(post_id)
    return Response(status=204)
