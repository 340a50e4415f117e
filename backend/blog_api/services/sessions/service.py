# blog_api/services/sessions/service.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from blog_api.core.config import AuthSettings
from blog_api.models.user import Role, User
from blog_api.repositories.user import UserRepository
from blog_api.services._shared.base import BaseService, ServiceContext
from blog_api.services._shared.clock import utcnow
from blog_api.services._shared.errors import (
    ConflictError,
    DuplicateIdentityError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    StoreError,
    TokenReusedError,
    ValidationError,
)
from blog_api.services._shared.ports.password_hasher import PasswordHasher
from blog_api.services._shared.ports.refresh_token_store import (
    ConsumeOutcome,
    ConsumeResult,
    RefreshGrant,
    RefreshTokenStore,
)
from blog_api.services._shared.ports.token_issuer import TokenIssuer
from blog_api.services.identity.dto import UserPublicOut
from blog_api.services.identity.service import to_user_public
from blog_api.services.sessions.dto import (
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    SessionInfoOut,
    SessionOut,
)
from blog_api.services.sessions.validation import validate_registration

logger = logging.getLogger(__name__)

#: Bounded attempts at allocating a refresh token when the digest collides.
MAX_REFRESH_ATTEMPTS = 3


class SessionService(BaseService):
    """
    Session lifecycle service (register / login / refresh / logout).

    Credentials are checked through a :class:`PasswordHasher`, access tokens
    are minted by a :class:`TokenIssuer`, and refresh sessions live in a
    :class:`RefreshTokenStore` that rotates them atomically and reports reuse.

    Session states: ``Anonymous -> Authenticated -> AccessExpired -> Revoked``;
    an expired access token is recovered through :meth:`refresh` while the
    refresh record is still valid.
    """

    def __init__(
        self,
        *,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        refresh_store: RefreshTokenStore,
        settings: AuthSettings,
        clock: Callable[[], datetime] = utcnow,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param hasher: One-way password hasher.
        :param tokens: Access-token issuer and refresh-secret generator.
        :param refresh_store: Stateful store for refresh sessions.
        :param settings: Frozen token lifetimes.
        :param clock: Source of "now" (UTC); injectable for tests.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.hasher = hasher
        self.tokens = tokens
        self.refresh_store = refresh_store
        self.settings = settings
        self.clock = clock

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> SessionOut:
        """
        Create a ``user``-role account and open its first session.

        :param dto: Registration input.
        :returns: Fresh token pair and public user.
        :raises ValidationError: If username, email or password is malformed.
        :raises DuplicateIdentityError: If the username or email is taken.
        """
        username = (dto.username or "").strip()
        email = (dto.email or "").strip().lower()
        errors = validate_registration(username=username, email=email, password=dto.password)
        if errors:
            raise ValidationError(errors)

        if dto.requested_role and dto.requested_role != Role.USER.value:
            # Elevated roles are granted only by administrative action.
            logger.info("Requested role ignored at registration", extra={"event": "register"})

        digest = self.hasher.hash(dto.password)
        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                if repo.exists_by_username_or_email(username, email):
                    raise DuplicateIdentityError()
                user = repo.add(
                    User(username=username, email=email, password_hash=digest, role=Role.USER)
                )
                public = to_user_public(user)
        except IntegrityError as exc:
            # Lost a uniqueness race against a concurrent registration
            raise DuplicateIdentityError() from exc
        except SQLAlchemyError as exc:
            raise StoreError() from exc

        logger.info("User registered", extra={"event": "register", "user_id": public.id})
        return self._open_session(public)

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> SessionOut:
        """
        Authenticate by username or email and issue a fresh token pair.

        Existing refresh sessions of the user are left untouched.

        :param dto: Login input.
        :returns: Token pair and public user.
        :raises InvalidCredentialsError: For any failure, without saying which.
        """
        login = (dto.login or "").strip()
        password = dto.password or ""

        digest: str | None = None
        public: UserPublicOut | None = None
        if login:
            try:
                with self.ro_uow() as uow:
                    user = uow.users.find_by_username_or_email(login)
                    if user is not None:
                        digest = user.password_hash
                        public = to_user_public(user)
            except SQLAlchemyError as exc:
                raise StoreError() from exc

        if digest is None or public is None:
            # Same cost as a real check so timing does not reveal unknown identities
            self.hasher.dummy_verify(password)
            logger.info("Login failed", extra={"event": "login", "reason": "unknown_identity"})
            raise InvalidCredentialsError()

        if not self.hasher.verify(password, digest):
            logger.info(
                "Login failed",
                extra={"event": "login", "reason": "bad_password", "user_id": public.id},
            )
            raise InvalidCredentialsError()

        logger.info("Login succeeded", extra={"event": "login", "user_id": public.id})
        return self._open_session(public)

    # ------------------------------------------------------------------ #
    # Refresh with atomic rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> SessionOut:
        """
        Rotate a refresh token and emit a new token pair.

        Security
        --------
        - The presented token is consumed and its replacement inserted in
          one atomic store operation; concurrent presenters get one winner.
        - **Reuse detection**: presenting a consumed token revokes every
          refresh session of its owner (kill switch).
        - Claims (role, username) are reloaded from the user record.

        :raises InvalidRefreshTokenError: Token absent, expired or revoked.
        :raises TokenReusedError: Token was already consumed.
        """
        token = (dto.refresh_token or "").strip()
        if not token:
            raise InvalidRefreshTokenError()

        outcome, new_refresh = self._rotate(token)

        if outcome.result is ConsumeResult.REUSED:
            # Incident: someone replayed a consumed refresh token
            revoked = 0
            if outcome.user_id is not None:
                revoked = self.refresh_store.revoke_all_for_user(outcome.user_id)
            logger.warning(
                "Refresh token reuse detected; all sessions revoked",
                extra={"event": "refresh_reuse", "user_id": outcome.user_id, "count": revoked},
            )
            raise TokenReusedError()

        if not outcome.ok or outcome.user_id is None:
            logger.info(
                "Refresh rejected",
                extra={"event": "refresh", "reason": outcome.result.name.lower()},
            )
            raise InvalidRefreshTokenError()

        try:
            with self.ro_uow() as uow:
                user = uow.users.get(outcome.user_id)
                public = to_user_public(user) if user is not None else None
        except SQLAlchemyError as exc:
            raise StoreError() from exc

        if public is None:
            self.refresh_store.revoke(new_refresh)
            raise InvalidRefreshTokenError()

        return self._session_out(public, new_refresh)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke the presented refresh session, or every session of its owner.

        Idempotent: unknown or already-revoked tokens are a no-op. Access
        tokens already issued stay valid until they expire.
        """
        token = (dto.refresh_token or "").strip()
        if not token:
            return

        if dto.all_sessions:
            view = self.refresh_store.get(token)
            if view is None:
                return
            count = self.refresh_store.revoke_all_for_user(view.user_id)
            logger.info(
                "Logged out everywhere",
                extra={"event": "logout", "user_id": view.user_id, "count": count},
            )
            return

        if self.refresh_store.revoke(token):
            logger.info("Logged out", extra={"event": "logout"})

    # ------------------------------------------------------------------ #
    # Session inventory
    # ------------------------------------------------------------------ #

    def list_sessions(self, user_id: int) -> list[SessionInfoOut]:
        """Return the currently valid refresh sessions of ``user_id``, oldest first."""
        return [
            SessionInfoOut(issued_at=v.issued_at, expires_at=v.expires_at)
            for v in self.refresh_store.list_user_sessions(user_id)
        ]

    def revoke_user_sessions(self, user_id: int) -> int:
        """
        Revoke every refresh session of ``user_id`` (administrative action).

        Access tokens already issued stay valid until they expire.

        :returns: Number of sessions revoked.
        """
        count = self.refresh_store.revoke_all_for_user(user_id)
        logger.warning(
            "Sessions revoked by administrator",
            extra={"event": "admin_revoke", "user_id": user_id, "count": count},
        )
        return count

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _grant(self) -> RefreshGrant:
        now = self.clock()
        return RefreshGrant(
            token=self.tokens.issue_refresh(),
            issued_at=now,
            expires_at=now + self.settings.refresh_ttl,
        )

    def _rotate(self, token: str) -> tuple[ConsumeOutcome, str]:
        for _ in range(MAX_REFRESH_ATTEMPTS):
            grant = self._grant()
            try:
                outcome = self.refresh_store.consume(
                    token, now=grant.issued_at, replacement=grant
                )
            except ConflictError:
                logger.warning("Refresh token collision", extra={"event": "refresh"})
                continue
            return outcome, grant.token
        raise StoreError("Could not allocate a refresh token")

    def _open_session(self, user: UserPublicOut) -> SessionOut:
        """Persist a new refresh record, then hand out the pair."""
        for _ in range(MAX_REFRESH_ATTEMPTS):
            grant = self._grant()
            try:
                self.refresh_store.create(
                    token=grant.token,
                    user_id=user.id,
                    issued_at=grant.issued_at,
                    expires_at=grant.expires_at,
                )
            except ConflictError:
                logger.warning("Refresh token collision", extra={"event": "session"})
                continue
            return self._session_out(user, grant.token)
        raise StoreError("Could not allocate a refresh token")

    def _session_out(self, user: UserPublicOut, refresh_token: str) -> SessionOut:
        access = self.tokens.issue_access(user_id=user.id, username=user.username, role=user.role)
        return SessionOut(
            access_token=access,
            refresh_token=refresh_token,
            expires_in=int(self.settings.access_ttl.total_seconds()),
            user=user,
        )
