from __future__ import annotations

import hashlib
import threading
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum, auto
from typing import Protocol

from blog_api.services._shared.errors import ConflictError


class ConsumeResult(Enum):
    """Outcome of an atomic refresh-token consumption attempt."""

    OK = auto()
    NOT_FOUND = auto()
    EXPIRED = auto()
    REVOKED = auto()
    REUSED = auto()


@dataclass(frozen=True, slots=True)
class ConsumeOutcome:
    """
    Result of :meth:`RefreshTokenStore.consume`.

    :ivar result: What happened.
    :ivar user_id: Owner of the presented token, when a record exists.
    """

    result: ConsumeResult
    user_id: int | None = None

    @property
    def ok(self) -> bool:
        return self.result is ConsumeResult.OK


@dataclass(frozen=True, slots=True)
class RefreshGrant:
    """A replacement token inserted atomically with the consumption of its parent."""

    token: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class RefreshTokenView:
    """
    Read-model for a refresh session.

    :ivar token_hash: SHA-256 hex digest of the opaque token.
    :ivar user_id: Owner user id.
    :ivar issued_at: Issuance time (UTC).
    :ivar expires_at: Absolute expiration (UTC).
    :ivar consumed: Whether the token has been rotated away.
    :ivar revoked: Whether the token has been explicitly revoked.
    """

    token_hash: str
    user_id: int
    issued_at: datetime
    expires_at: datetime
    consumed: bool = False
    revoked: bool = False


def hash_token(token: str) -> str:
    """Digest used as the storage key; the raw secret is never persisted."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def as_utc(dt: datetime) -> datetime:
    """Label naive datetimes (e.g. read back from SQLite) as UTC."""
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)


def is_expired(view: RefreshTokenView, now: datetime) -> bool:
    """Pure expiry check; expired records are treated as absent."""
    return as_utc(view.expires_at) <= as_utc(now)


def is_valid(view: RefreshTokenView | None, now: datetime) -> bool:
    """``exists AND NOT expired AND NOT consumed AND NOT revoked``."""
    return (
        view is not None
        and not is_expired(view, now)
        and not view.consumed
        and not view.revoked
    )


def classify_failure(view: RefreshTokenView | None, now: datetime) -> ConsumeResult:
    """
    Explain why a conditional consume did not match.

    A consumed token wins over revocation so a replay stays visible as reuse
    even after the kill switch revoked the whole family.
    """
    if view is None:
        return ConsumeResult.NOT_FOUND
    if is_expired(view, now):
        return ConsumeResult.EXPIRED
    if view.consumed:
        return ConsumeResult.REUSED
    if view.revoked:
        return ConsumeResult.REVOKED
    return ConsumeResult.OK


class RefreshTokenStore(Protocol):
    """
    Persistent store for refresh sessions.

    ``consume`` MUST be a single atomic conditional mutation: among concurrent
    callers presenting the same token exactly one observes ``OK``.
    """

    def create(
        self, *, token: str, user_id: int, expires_at: datetime, issued_at: datetime
    ) -> None:
        """
        Insert a new refresh record.

        :raises ConflictError: On token digest collision.
        :raises StoreError: When the backend is unavailable.
        """

    def consume(
        self, token: str, *, now: datetime, replacement: RefreshGrant | None = None
    ) -> ConsumeOutcome:
        """
        Atomically mark ``token`` consumed and, if given, insert ``replacement``
        for the same owner in the same transaction.
        """

    def revoke(self, token: str) -> bool:
        """Revoke a single token. :returns: True if a live record was revoked."""

    def revoke_all_for_user(self, user_id: int) -> int:
        """Revoke every refresh record of ``user_id``. :returns: Rows affected."""

    def get(self, token: str) -> RefreshTokenView | None:
        """Fetch a single record snapshot (if present)."""

    def list_user_sessions(self, user_id: int) -> Iterable[RefreshTokenView]:
        """List currently valid sessions for a user."""

    def purge_expired(self, now: datetime) -> int:
        """Delete expired records; idempotent. :returns: Records removed."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    Process-local refresh store.

    .. note::
       The lock is the store's own atomicity primitive; suitable for a single
       process and for tests.
    """

    def __init__(self) -> None:
        self._by_hash: dict[str, RefreshTokenView] = {}
        self._lock = threading.Lock()

    def create(
        self, *, token: str, user_id: int, expires_at: datetime, issued_at: datetime
    ) -> None:
        with self._lock:
            self._insert(token, user_id=user_id, expires_at=expires_at, issued_at=issued_at)

    def _insert(
        self, token: str, *, user_id: int, expires_at: datetime, issued_at: datetime
    ) -> None:
        key = hash_token(token)
        if key in self._by_hash:
            raise ConflictError("RefreshToken")
        self._by_hash[key] = RefreshTokenView(
            token_hash=key,
            user_id=user_id,
            issued_at=as_utc(issued_at),
            expires_at=as_utc(expires_at),
        )

    def consume(
        self, token: str, *, now: datetime, replacement: RefreshGrant | None = None
    ) -> ConsumeOutcome:
        key = hash_token(token)
        with self._lock:
            view = self._by_hash.get(key)
            if view is None or not is_valid(view, now):
                return ConsumeOutcome(
                    classify_failure(view, now), view.user_id if view else None
                )
            if replacement is not None:
                self._insert(
                    replacement.token,
                    user_id=view.user_id,
                    expires_at=replacement.expires_at,
                    issued_at=replacement.issued_at,
                )
            self._by_hash[key] = replace(view, consumed=True)
            return ConsumeOutcome(ConsumeResult.OK, view.user_id)

    def revoke(self, token: str) -> bool:
        key = hash_token(token)
        with self._lock:
            view = self._by_hash.get(key)
            if view is None or view.revoked:
                return False
            self._by_hash[key] = replace(view, revoked=True)
            return True

    def revoke_all_for_user(self, user_id: int) -> int:
        with self._lock:
            keys = [
                k for k, v in self._by_hash.items() if v.user_id == user_id and not v.revoked
            ]
            for k in keys:
                self._by_hash[k] = replace(self._by_hash[k], revoked=True)
            return len(keys)

    def get(self, token: str) -> RefreshTokenView | None:
        with self._lock:
            return self._by_hash.get(hash_token(token))

    def list_user_sessions(self, user_id: int) -> Iterable[RefreshTokenView]:
        now = datetime.now(UTC)
        with self._lock:
            views = [v for v in self._by_hash.values() if v.user_id == user_id]
        return sorted(
            (v for v in views if is_valid(v, now)), key=lambda v: (v.issued_at, v.token_hash)
        )

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            stale = [k for k, v in self._by_hash.items() if is_expired(v, now)]
            for k in stale:
                del self._by_hash[k]
            return len(stale)
