"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask, HTTP, or
SQLAlchemy. They are the stable contract between stores, repositories and
application services.

The translation to HTTP responses (RFC 7807) is handled once by
``blog_api/core/errors.py``. Messages are client-safe: none of them carries
password material, token secrets, or which identity field collided.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to ``APIError`` subclasses.
    """

    default_message = "Service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


# --------------------------------------------------------------------------- #
# Input & identity
# --------------------------------------------------------------------------- #


class ValidationError(ServiceError):
    """
    Raised when caller-supplied input is malformed.

    :param errors: Mapping of field name to human-readable messages.
    """

    default_message = "Validation failed"

    def __init__(self, errors: dict[str, list[str]], message: str | None = None) -> None:
        super().__init__(message)
        self.errors = errors


class InvalidCredentialsError(ServiceError):
    """Generic login failure; never says whether the identity exists."""

    default_message = "Invalid credentials"


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "Post").
    :param key: Identifier or search key.
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "RefreshToken").
    :param detail: Short human-readable explanation.
    """

    entity: str
    detail: str = field(default="already exists")

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class DuplicateIdentityError(ServiceError):
    """Registration conflict; deliberately hides the colliding field."""

    default_message = "Username or email already in use"


# --------------------------------------------------------------------------- #
# Tokens & sessions
# --------------------------------------------------------------------------- #


class InvalidRefreshTokenError(ServiceError):
    """Refresh token absent, expired or revoked; the client must sign in again."""

    default_message = "Refresh token is no longer valid. Please sign in."


class TokenReusedError(InvalidRefreshTokenError):
    """A consumed refresh token was presented again (possible theft)."""


class UnauthorizedError(ServiceError):
    """Missing or invalid access token."""

    default_message = "Authentication required"
    reason = "unauthorized"


class InvalidSignatureError(UnauthorizedError):
    """Access token signature does not verify."""

    reason = "invalid_signature"


class TokenExpiredError(UnauthorizedError):
    """Access token ``exp`` is in the past."""

    reason = "expired"


class MalformedTokenError(UnauthorizedError):
    """Access token cannot be decoded or lacks required claims."""

    reason = "malformed"


class AuthorizationError(ServiceError):
    """Authenticated subject lacks permission for the action (Forbidden)."""

    default_message = "You are not allowed to perform this action"


# --------------------------------------------------------------------------- #
# Infrastructure
# --------------------------------------------------------------------------- #


class StoreError(ServiceError):
    """Backing store unavailable or failed mid-operation; not retried here."""

    default_message = "Storage backend unavailable"
