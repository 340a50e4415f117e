"""
blog_api.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that define the contracts for
credential and session infrastructure.

Modules
-------
- :mod:`password_hasher`:
    :class:`~.PasswordHasher` — one-way password hashing and verification.

- :mod:`token_issuer`:
    :class:`~.TokenIssuer` — access-token minting/verification and opaque
    refresh-secret generation.

- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore` and its value objects — persistence with
    atomic single-winner consumption.

Concrete adapters (SQL, Redis, JWT, Werkzeug) live under ``blog_api.infra``.
"""

from __future__ import annotations

from .password_hasher import PasswordHasher, PlainPrefixHasher
from .refresh_token_store import (
    ConsumeOutcome,
    ConsumeResult,
    InMemoryRefreshTokenStore,
    RefreshGrant,
    RefreshTokenStore,
    RefreshTokenView,
    hash_token,
    is_expired,
    is_valid,
)
from .token_issuer import AccessClaims, StubTokenIssuer, TokenIssuer

__all__ = [
    "AccessClaims",
    "ConsumeOutcome",
    "ConsumeResult",
    "InMemoryRefreshTokenStore",
    "PasswordHasher",
    "PlainPrefixHasher",
    "RefreshGrant",
    "RefreshTokenStore",
    "RefreshTokenView",
    "StubTokenIssuer",
    "TokenIssuer",
    "hash_token",
    "is_expired",
    "is_valid",
]
