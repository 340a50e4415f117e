# comments in English; reST docstrings
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]

from blog_api.services._shared.errors import ConflictError, StoreError
from blog_api.services._shared.ports.refresh_token_store import (
    ConsumeOutcome,
    ConsumeResult,
    RefreshGrant,
    RefreshTokenStore,
    RefreshTokenView,
    as_utc,
    classify_failure,
    hash_token,
    is_expired,
    is_valid,
)

logger = logging.getLogger(__name__)


def _s(value: bytes | str | None, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store with atomic consumption.

    Records live in hashes keyed by token digest (``rt:<sha256>``) with a TTL
    equal to their remaining lifetime; ``rt:u:<user_id>`` indexes a user's
    digests for bulk revocation.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token_hash: str) -> str:
        return f"rt:{token_hash}"

    @staticmethod
    def _ku(user_id: int | str) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> float:
        return as_utc(dt).timestamp()

    def _ttl(self, expires_at: datetime, now: datetime) -> int:
        return max(1, int(self._to_ts(expires_at) - self._to_ts(now)) + 1)

    def _mapping(self, *, user_id: int, issued_at: datetime, expires_at: datetime) -> dict:
        return {
            "user_id": str(user_id),
            "issued_at": repr(self._to_ts(issued_at)),
            "expires_at": repr(self._to_ts(expires_at)),
            "consumed": "0",
            "revoked": "0",
        }

    @staticmethod
    def _view(token_hash: str, h: dict) -> RefreshTokenView:
        def field(name: str, default: str = "") -> str:
            return _s(h.get(name.encode(), h.get(name)), default)

        return RefreshTokenView(
            token_hash=token_hash,
            user_id=int(field("user_id", "0")),
            issued_at=datetime.fromtimestamp(float(field("issued_at", "0")), tz=UTC),
            expires_at=datetime.fromtimestamp(float(field("expires_at", "0")), tz=UTC),
            consumed=field("consumed", "0") == "1",
            revoked=field("revoked", "0") == "1",
        )

    # -------------------- API ------------------------

    def create(
        self, *, token: str, user_id: int, expires_at: datetime, issued_at: datetime
    ) -> None:
        key_hash = hash_token(token)
        key = self._k(key_hash)
        try:
            # NX on a sentinel field detects digest collisions without a round trip.
            if not self.r.hsetnx(key, "user_id", str(user_id)):
                raise ConflictError("RefreshToken")
            pipe = self.r.pipeline(transaction=True)
            pipe.hset(
                key,
                mapping=self._mapping(
                    user_id=user_id, issued_at=issued_at, expires_at=expires_at
                ),
            )
            pipe.expire(key, self._ttl(expires_at, datetime.now(UTC)))
            pipe.sadd(self._ku(user_id), key_hash)
            pipe.execute()
        except redis.RedisError as exc:
            raise StoreError() from exc

    def consume(
        self, token: str, *, now: datetime, replacement: RefreshGrant | None = None
    ) -> ConsumeOutcome:
        """
        Atomically consume ``token`` and create ``replacement``.

        Uses Redis WATCH/MULTI/EXEC (optimistic locking):
        - Check existence and state of the record.
        - Reject if expired/consumed/revoked.
        - Mark consumed and create the replacement in one atomic step.
        A concurrent writer aborts EXEC and the loop re-reads the state, so a
        losing caller observes ``REUSED``.
        """
        key_hash = hash_token(token)
        k_old = self._k(key_hash)
        new_hash = hash_token(replacement.token) if replacement is not None else None
        k_new = self._k(new_hash) if new_hash is not None else None

        try:
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(k_old, *([k_new] if k_new else []))

                        h = p.hgetall(k_old)
                        view = self._view(key_hash, h) if h else None
                        if view is None or not is_valid(view, now):
                            p.unwatch()
                            return ConsumeOutcome(
                                classify_failure(view, now), view.user_id if view else None
                            )
                        if k_new is not None and p.exists(k_new):
                            p.unwatch()
                            raise ConflictError("RefreshToken")

                        p.multi()
                        p.hset(k_old, "consumed", "1")
                        if replacement is not None and k_new is not None:
                            p.hset(
                                k_new,
                                mapping=self._mapping(
                                    user_id=view.user_id,
                                    issued_at=replacement.issued_at,
                                    expires_at=replacement.expires_at,
                                ),
                            )
                            p.expire(k_new, self._ttl(replacement.expires_at, now))
                            p.sadd(self._ku(view.user_id), new_hash)
                        p.execute()
                    return ConsumeOutcome(ConsumeResult.OK, view.user_id)
                except redis.WatchError:
                    # Concurrent modification detected; re-evaluate
                    continue
        except redis.RedisError as exc:
            raise StoreError() from exc

    def revoke(self, token: str) -> bool:
        key = self._k(hash_token(token))
        try:
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(key)
                        ttl_ms = p.pttl(key)
                        if ttl_ms == -2 or _s(p.hget(key, "revoked"), "0") == "1":
                            p.unwatch()
                            return False
                        p.multi()
                        p.hset(key, "revoked", "1")
                        if ttl_ms > 0:
                            p.pexpire(key, ttl_ms)
                        p.execute()
                    return True
                except redis.WatchError:
                    continue
        except redis.RedisError as exc:
            raise StoreError() from exc

    def revoke_all_for_user(self, user_id: int) -> int:
        """
        Revoke every indexed record of ``user_id`` in one transaction.

        The index and the records are watched, so a rotation that adds a
        replacement meanwhile forces a re-read; only the members read are
        removed from the index.
        """
        key_u = self._ku(user_id)
        try:
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(key_u)
                        hashes = sorted(_s(m) for m in p.smembers(key_u))
                        if not hashes:
                            p.unwatch()
                            return 0
                        p.watch(*(self._k(h) for h in hashes))
                        live: list[tuple[str, int]] = []
                        for token_hash in hashes:
                            key = self._k(token_hash)
                            ttl_ms = p.pttl(key)
                            if ttl_ms != -2 and _s(p.hget(key, "revoked"), "0") != "1":
                                live.append((key, ttl_ms))
                        p.multi()
                        for key, ttl_ms in live:
                            p.hset(key, "revoked", "1")
                            if ttl_ms > 0:
                                p.pexpire(key, ttl_ms)
                        p.srem(key_u, *hashes)
                        p.execute()
                    return len(live)
                except redis.WatchError:
                    continue
        except redis.RedisError as exc:
            raise StoreError() from exc

    def get(self, token: str) -> RefreshTokenView | None:
        key_hash = hash_token(token)
        try:
            h = self.r.hgetall(self._k(key_hash))
        except redis.RedisError as exc:
            raise StoreError() from exc
        return self._view(key_hash, h) if h else None

    def list_user_sessions(self, user_id: int) -> Iterable[RefreshTokenView]:
        key_u = self._ku(user_id)
        now = datetime.now(UTC)
        try:
            members = sorted(_s(m) for m in self.r.smembers(key_u))
            views: list[RefreshTokenView] = []
            stale: list[str] = []
            for token_hash in members:
                h = self.r.hgetall(self._k(token_hash))
                if not h:
                    # Underlying hash expired -> drop from the index
                    stale.append(token_hash)
                    continue
                view = self._view(token_hash, h)
                if is_valid(view, now):
                    views.append(view)
            if stale:
                self.r.srem(key_u, *stale)
        except redis.RedisError as exc:
            raise StoreError() from exc
        return sorted(views, key=lambda v: (v.issued_at, v.token_hash))

    def purge_expired(self, now: datetime) -> int:
        """
        Delete records whose ``expires_at`` passed and prune user indexes.

        Key TTLs already evict most records; this sweeps the remainder.
        """
        removed = 0
        try:
            for key_u in self.r.scan_iter(match="rt:u:*"):
                stale: list[str] = []
                for member in self.r.smembers(key_u):
                    token_hash = _s(member)
                    h = self.r.hgetall(self._k(token_hash))
                    if not h:
                        stale.append(token_hash)
                    elif is_expired(self._view(token_hash, h), now):
                        self.r.delete(self._k(token_hash))
                        stale.append(token_hash)
                        removed += 1
                if stale:
                    self.r.srem(key_u, *stale)
        except redis.RedisError as exc:
            raise StoreError() from exc
        logger.info("Purged expired refresh tokens", extra={"event": "purge", "count": removed})
        return removed
