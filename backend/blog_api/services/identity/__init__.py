from .dto import UserPublicOut
from .service import IdentityService, to_user_public

__all__ = ["IdentityService", "UserPublicOut", "to_user_public"]
