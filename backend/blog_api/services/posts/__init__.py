from .dto import PostCreateIn, PostListIn, PostListOut, PostOut, PostUpdateIn
from .service import PostService

__all__ = ["PostCreateIn", "PostListIn", "PostListOut", "PostOut", "PostService", "PostUpdateIn"]
