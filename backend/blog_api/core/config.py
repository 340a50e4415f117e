"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset({"CHANGE_ME", "CHANGE_ME_JWT"})

# Loads .env during development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Defaults to a development placeholder and must be
        overridden in production.
    JWT_SECRET_KEY: str
        Key used by ``flask-jwt-extended`` for signing access tokens.
    JWT_ALGORITHM: str
        Signing algorithm for access tokens (``HS256`` by default).
    ACCESS_TOKEN_TTL_SECONDS: int
        Access token lifetime (15 minutes by default).
    REFRESH_TOKEN_TTL_SECONDS: int
        Refresh token lifetime (7 days by default).
    PASSWORD_HASH_METHOD: str
        Werkzeug hashing method string; encodes the work factor.
    PASSWORD_SALT_LENGTH: int
        Random salt length embedded in every digest.
    REFRESH_STORE_BACKEND: str
        ``sql`` (default), ``redis`` or ``memory``.
    REDIS_URL: str | None
        Redis connection URL; required by the ``redis`` backend.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    AUTH_LOGIN_RATE_LIMIT: str
        Flask-Limiter expression applied to the login endpoint.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_TTL_SECONDS = env_int("ACCESS_TOKEN_TTL_SECONDS", 15 * 60)
    REFRESH_TOKEN_TTL_SECONDS = env_int("REFRESH_TOKEN_TTL_SECONDS", 7 * 24 * 3600)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt:32768:8:1")
    PASSWORD_SALT_LENGTH = env_int("PASSWORD_SALT_LENGTH", 16)

    # Refresh sessions
    REFRESH_STORE_BACKEND = os.getenv("REFRESH_STORE_BACKEND", "sql")
    REDIS_URL = os.getenv("REDIS_URL")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./blog.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    # Rate limiting
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Lowers the password work factor so the suite stays fast.
    - Disables rate limiting.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = True
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    RATELIMIT_ENABLED = False
    REFRESH_STORE_BACKEND = "sql"
    REDIS_URL = None


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Immutable snapshot of the authentication settings.

    Built once at startup from the Flask config and injected into every
    component that needs it.

    :ivar access_ttl: Access token lifetime.
    :ivar refresh_ttl: Refresh token lifetime.
    :ivar password_hash_method: Werkzeug hashing method string.
    :ivar password_salt_length: Salt length for new digests.
    :ivar refresh_store_backend: Refresh store backend name.
    :ivar redis_url: Redis URL for the ``redis`` backend.
    """

    access_ttl: timedelta
    refresh_ttl: timedelta
    password_hash_method: str
    password_salt_length: int
    refresh_store_backend: str
    redis_url: str | None = None

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthSettings:
        """Build settings from a Flask config mapping, validating ranges."""
        access_ttl = timedelta(seconds=int(config.get("ACCESS_TOKEN_TTL_SECONDS", 900)))
        refresh_ttl = timedelta(seconds=int(config.get("REFRESH_TOKEN_TTL_SECONDS", 604800)))
        if access_ttl <= timedelta(0) or refresh_ttl <= access_ttl:
            raise RuntimeError("Token lifetimes must satisfy 0 < access TTL < refresh TTL.")
        backend = str(config.get("REFRESH_STORE_BACKEND", "sql")).strip().lower()
        if backend not in {"sql", "redis", "memory"}:
            raise RuntimeError(f"Unknown REFRESH_STORE_BACKEND {backend!r}.")
        return cls(
            access_ttl=access_ttl,
            refresh_ttl=refresh_ttl,
            password_hash_method=str(config.get("PASSWORD_HASH_METHOD", "scrypt:32768:8:1")),
            password_salt_length=int(config.get("PASSWORD_SALT_LENGTH", 16)),
            refresh_store_backend=backend,
            redis_url=config.get("REDIS_URL") or None,
        )


def ensure_production_secrets(config: Mapping[str, Any]) -> None:
    """Refuse to boot a non-debug, non-testing app with placeholder secrets."""
    if config.get("DEBUG") or config.get("TESTING"):
        return
    for key in ("SECRET_KEY", "JWT_SECRET_KEY"):
        if str(config.get(key, "")) in PLACEHOLDER_SECRETS:
            raise RuntimeError(f"{key} must be set in production.")
