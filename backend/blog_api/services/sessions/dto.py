# blog_api/services/sessions/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from blog_api.services.identity.dto import UserPublicOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param username: Desired public handle.
    :type username: str
    :param email: Email address (normalized by the service).
    :type email: str
    :param password: Raw password (hashed, never stored).
    :type password: str
    :param requested_role: Role asked for by the client; always downgraded to ``user``.
    :type requested_role: str | None
    """

    username: str
    email: str
    password: str
    requested_role: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param login: Username or email.
    :type login: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    login: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque refresh token.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param refresh_token: Opaque refresh token to revoke.
    :type refresh_token: str
    :param all_sessions: If True, revoke every refresh session of the owner.
    :type all_sessions: bool
    """

    refresh_token: str
    all_sessions: bool = False


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SessionOut:
    """
    Output DTO of register/login/refresh.

    :param access_token: Signed access JWT.
    :param refresh_token: Opaque refresh token.
    :param expires_in: Access token lifetime in seconds.
    :param user: Public projection of the authenticated user.
    :param token_type: Always ``"Bearer"``.
    """

    access_token: str
    refresh_token: str
    expires_in: int
    user: UserPublicOut
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class SessionInfoOut:
    """
    One active refresh session, without any token material.

    :param issued_at: When the session (or its latest rotation) was issued.
    :param expires_at: Absolute expiry of the refresh token.
    """

    issued_at: datetime
    expires_at: datetime
