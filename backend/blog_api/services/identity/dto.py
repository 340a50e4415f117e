# blog_api/services/identity/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public-safe projection of a user.

    :param id: User id.
    :type id: int
    :param username: Public handle.
    :type username: str
    :param email: Normalized email.
    :type email: str
    :param role: ``"user"`` or ``"admin"``.
    :type role: str
    :param created_at: Creation timestamp (UTC).
    :type created_at: datetime | None
    """

    id: int
    username: str
    email: str
    role: str
    created_at: datetime | None = None
