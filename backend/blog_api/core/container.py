"""Build the authentication components once per app and hand them to services."""

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from blog_api.core.config import AuthSettings
from blog_api.core.extensions import get_redis
from blog_api.infra.jwt.flask_jwt_token_issuer import FlaskJWTTokenIssuer
from blog_api.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from blog_api.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from blog_api.infra.sql.sql_refresh_token_store import SQLRefreshTokenStore
from blog_api.services._shared.base import ServiceContext
from blog_api.services._shared.ports import (
    InMemoryRefreshTokenStore,
    PasswordHasher,
    RefreshTokenStore,
    TokenIssuer,
)
from blog_api.services.sessions.service import SessionService

EXTENSION_KEY = "auth"


@dataclass(frozen=True, slots=True)
class AuthComponents:
    """
    Immutable bundle of the auth collaborators.

    :ivar settings: Frozen auth settings.
    :ivar hasher: Credential hasher.
    :ivar tokens: Access-token issuer.
    :ivar refresh_store: Refresh session store for the configured backend.
    """

    settings: AuthSettings
    hasher: PasswordHasher
    tokens: TokenIssuer
    refresh_store: RefreshTokenStore

    def session_service(self, ctx: ServiceContext | None = None) -> SessionService:
        return SessionService(
            hasher=self.hasher,
            tokens=self.tokens,
            refresh_store=self.refresh_store,
            settings=self.settings,
            ctx=ctx,
        )


def build_refresh_store(settings: AuthSettings) -> RefreshTokenStore:
    """Instantiate the refresh store selected by ``REFRESH_STORE_BACKEND``."""
    if settings.refresh_store_backend == "redis":
        if not settings.redis_url:
            raise RuntimeError("REFRESH_STORE_BACKEND=redis requires REDIS_URL.")
        return RedisRefreshTokenStore(r=get_redis())
    if settings.refresh_store_backend == "memory":
        return InMemoryRefreshTokenStore()
    return SQLRefreshTokenStore()


def build_components(settings: AuthSettings) -> AuthComponents:
    return AuthComponents(
        settings=settings,
        hasher=WerkzeugPasswordHasher(
            method=settings.password_hash_method, salt_length=settings.password_salt_length
        ),
        tokens=FlaskJWTTokenIssuer(access_ttl=settings.access_ttl),
        refresh_store=build_refresh_store(settings),
    )


def init_app(app: Flask) -> None:
    """Freeze auth settings from ``app.config`` and register the components."""
    settings = AuthSettings.from_mapping(app.config)
    with app.app_context():
        app.extensions[EXTENSION_KEY] = build_components(settings)


def get_auth() -> AuthComponents:
    """Return the components bound to the current app."""
    return current_app.extensions[EXTENSION_KEY]
