"""Flask extension singletons and their initialization."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

REDIS_EXTENSION_KEY = "redis_client"

# Constraint names stay stable across SQLite and PostgreSQL
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def init_app(app: Flask) -> None:
    """
    Bind the database, migrations, JWT and the login rate limiter to ``app``.

    A Redis client is opened only when refresh sessions live in Redis; the
    connection is checked eagerly so a bad ``REDIS_URL`` fails at startup.

    :raises RuntimeError: If the Redis backend is selected but unreachable.
    """
    db.init_app(app)

    # Models must be registered on the metadata before migrations inspect it
    from blog_api import models as _models  # noqa: F401

    migrate.init_app(app, db)

    app.config.setdefault("JWT_ACCESS_TOKEN_EXPIRES", app.config["ACCESS_TOKEN_TTL_SECONDS"])
    jwt.init_app(app)
    limiter.init_app(app)

    app.extensions.pop(REDIS_EXTENSION_KEY, None)
    backend = str(app.config.get("REFRESH_STORE_BACKEND", "sql")).strip().lower()
    redis_url = app.config.get("REDIS_URL")
    if backend != "redis" or not redis_url:
        return

    client = redis.Redis.from_url(redis_url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions[REDIS_EXTENSION_KEY] = client


def get_redis() -> redis.Redis:
    """Return the Redis client bound to the current app."""
    client = current_app.extensions.get(REDIS_EXTENSION_KEY)
    if client is None:
        raise RuntimeError("Redis client is not initialized; set REFRESH_STORE_BACKEND=redis and REDIS_URL.")
    return client
