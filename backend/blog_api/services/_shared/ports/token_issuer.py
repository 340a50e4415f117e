from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from blog_api.services._shared.errors import MalformedTokenError, TokenExpiredError

#: Entropy (bytes) behind every opaque refresh token.
REFRESH_TOKEN_BYTES = 48


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """
    Verified access-token claims.

    :ivar user_id: ``id`` claim.
    :ivar username: ``username`` claim (snapshot at issuance).
    :ivar role: ``role`` claim (snapshot at issuance).
    :ivar issued_at: ``iat`` as aware UTC datetime.
    :ivar expires_at: ``exp`` as aware UTC datetime.
    """

    user_id: int
    username: str
    role: str
    issued_at: datetime
    expires_at: datetime


class TokenIssuer(Protocol):
    """Port for minting and verifying access tokens and minting refresh secrets."""

    access_ttl: timedelta

    def issue_access(self, *, user_id: int, username: str, role: str) -> str: ...

    def issue_refresh(self) -> str:
        """Return a fresh opaque refresh secret, unrelated to any user data."""
        return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)

    def verify_access(self, token: str) -> AccessClaims:
        """
        Verify signature, expiry and token type.

        :raises InvalidSignatureError: Signature does not match.
        :raises TokenExpiredError: ``exp`` is in the past.
        :raises MalformedTokenError: Undecodable or missing claims.
        """
        ...


class StubTokenIssuer(TokenIssuer):
    """Deterministic issuer used in unit tests that do not need real JWTs."""

    def __init__(self, access_ttl: timedelta = timedelta(minutes=15)) -> None:
        self.access_ttl = access_ttl
        self._seq = 0
        self._issued: dict[str, AccessClaims] = {}

    def issue_access(self, *, user_id: int, username: str, role: str) -> str:
        self._seq += 1
        now = datetime.now(UTC)
        token = f"access.{user_id}.{self._seq}"
        self._issued[token] = AccessClaims(
            user_id=user_id,
            username=username,
            role=role,
            issued_at=now,
            expires_at=now + self.access_ttl,
        )
        return token

    def issue_refresh(self) -> str:
        return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)

    def verify_access(self, token: str) -> AccessClaims:
        claims = self._issued.get(token)
        if claims is None:
            raise MalformedTokenError()
        if claims.expires_at <= datetime.now(UTC):
            raise TokenExpiredError()
        return claims
