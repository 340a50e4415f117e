from blog_api.models.post import Post
from blog_api.models.refresh_token import RefreshToken
from blog_api.models.user import Role, User

__all__ = [
    "Post",
    "RefreshToken",
    "Role",
    "User",
]
