"""Shared API helpers: bearer authentication, role checks, responses, timing."""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from blog_api.core.container import get_auth
from blog_api.core.errors import Forbidden, Unauthorized
from blog_api.core.logger import ensure_request_id
from blog_api.schemas.common import PaginationQuerySchema
from blog_api.services._shared.base import ServiceContext
from blog_api.services._shared.dto import PaginationIn
from blog_api.services._shared.errors import UnauthorizedError

F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


@dataclass(frozen=True, slots=True)
class Identity:
    """Authenticated caller attached to ``flask.g.identity``."""

    user_id: int
    username: str
    role: str


def _bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX) :].strip()
    return token or None


def require_auth(func: F) -> F:
    """
    Ensure the request carries a valid bearer access token.

    On success ``g.identity`` holds an :class:`Identity`. Every failure kind
    (missing, expired, bad signature, malformed) yields the same 401 body;
    the kind is only logged.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = _bearer_token()
        if token is None:
            log.info("auth.rejected", extra={"reason": "missing_bearer"})
            raise Unauthorized("Access token required")
        try:
            claims = get_auth().tokens.verify_access(token)
        except UnauthorizedError as exc:
            log.warning(
                "auth.rejected", extra={"reason": exc.reason, "endpoint": request.endpoint}
            )
            raise Unauthorized("Invalid or expired access token") from exc
        g.identity = Identity(user_id=claims.user_id, username=claims.username, role=claims.role)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_role(role: str) -> Callable[[F], F]:
    """Ensure the authenticated caller carries ``role`` (403 otherwise)."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        @require_auth
        def wrapper(*args: Any, **kwargs: Any):
            if current_identity().role != role:
                raise Forbidden("Insufficient role")
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def current_identity() -> Identity:
    """Return the identity set by :func:`require_auth`."""
    identity = getattr(g, "identity", None)
    if identity is None:
        raise Unauthorized("Access token required")
    return cast(Identity, identity)


def service_context() -> ServiceContext:
    """Build a service context from the request (identity optional)."""
    identity = getattr(g, "identity", None)
    return ServiceContext(
        actor_id=identity.user_id if identity else None,
        role=identity.role if identity else None,
        request_id=ensure_request_id(),
    )


def parse_pagination(
    default_limit: int = 20, max_limit: int = 100
) -> tuple[PaginationIn, int | None]:
    """Parse pagination parameters (and ``author_id``) from ``request.args``."""
    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args)
    pagination = PaginationIn(page=data["page"], limit=data["limit"], sort=data["sort"])
    return pagination, data.get("author_id")


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
