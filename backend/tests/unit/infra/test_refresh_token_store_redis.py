"""
Unit tests for RedisRefreshTokenStore using fakeredis.

These tests exercise the main flows:
- create + get (digest keys only)
- consume (success, reuse, expired, revoked, not found)
- consume with replacement
- revoke / revoke_all_for_user
- list_user_sessions cleanup and purge_expired

They use fakeredis.FakeRedis so they run entirely in-memory.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from redis.client import Pipeline

from blog_api.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from blog_api.services._shared.errors import ConflictError
from blog_api.services._shared.ports import ConsumeResult, RefreshGrant, hash_token


def _now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    """Provide a RedisRefreshTokenStore backed by FakeRedis."""
    return RedisRefreshTokenStore(r=fake_redis)


def _create(store, token: str, *, user_id: int = 1, ttl: int = 300, now=None):
    now = now or _now()
    store.create(
        token=token, user_id=user_id, issued_at=now, expires_at=now + timedelta(seconds=ttl)
    )


def test_create_and_get(store, fake_redis):
    _create(store, "rt-secret", user_id=4)

    view = store.get("rt-secret")

    assert view is not None
    assert view.user_id == 4
    assert view.consumed is False and view.revoked is False
    keys = {k.decode() for k in fake_redis.keys("*")}
    assert f"rt:{hash_token('rt-secret')}" in keys
    assert not any("rt-secret" in k for k in keys)


def test_create_collision_raises_conflict(store):
    _create(store, "dup")
    with pytest.raises(ConflictError):
        _create(store, "dup")


def test_records_carry_a_ttl(store, fake_redis):
    _create(store, "rt", ttl=120)
    ttl = fake_redis.ttl(f"rt:{hash_token('rt')}")
    assert 0 < ttl <= 121


def test_consume_once_then_reused(store):
    _create(store, "rt", user_id=8)

    assert store.consume("rt", now=_now()).result is ConsumeResult.OK
    second = store.consume("rt", now=_now())

    assert second.result is ConsumeResult.REUSED
    assert second.user_id == 8


def test_consume_not_found_expired_revoked(store):
    now = _now()
    _create(store, "old", ttl=30, now=now - timedelta(seconds=60))
    _create(store, "gone")
    store.revoke("gone")

    assert store.consume("missing", now=now).result is ConsumeResult.NOT_FOUND
    assert store.consume("old", now=now).result is ConsumeResult.EXPIRED
    assert store.consume("gone", now=now).result is ConsumeResult.REVOKED


def test_consume_with_replacement(store):
    now = _now()
    _create(store, "parent", user_id=2, now=now)

    outcome = store.consume(
        "parent",
        now=now,
        replacement=RefreshGrant(token="child", issued_at=now, expires_at=now + timedelta(hours=1)),
    )

    assert outcome.ok and outcome.user_id == 2
    assert store.get("child").user_id == 2
    assert [v.token_hash for v in store.list_user_sessions(2)] == [hash_token("child")]


def test_revoke_all_for_user(store):
    _create(store, "a1", user_id=1)
    _create(store, "a2", user_id=1)
    _create(store, "b1", user_id=2)

    assert store.revoke_all_for_user(1) == 2
    assert store.get("a1").revoked and store.get("a2").revoked
    assert store.get("b1").revoked is False
    assert store.revoke_all_for_user(1) == 0


def test_list_user_sessions_drops_stale_index_entries(store, fake_redis):
    _create(store, "live", user_id=6)
    _create(store, "vanished", user_id=6)
    fake_redis.delete(f"rt:{hash_token('vanished')}")

    sessions = list(store.list_user_sessions(6))

    assert [v.token_hash for v in sessions] == [hash_token("live")]
    members = {m.decode() for m in fake_redis.smembers("rt:u:6")}
    assert members == {hash_token("live")}


def test_purge_expired(store):
    now = _now()
    _create(store, "stale", ttl=5, now=now - timedelta(minutes=1))
    _create(store, "fresh", now=now)

    assert store.purge_expired(now) == 1
    assert store.purge_expired(now) == 0
    assert store.get("stale") is None
    assert store.get("fresh") is not None


def test_revoke_keeps_the_record_ttl(store, fake_redis):
    _create(store, "ttl-kept", ttl=300)
    key = f"rt:{hash_token('ttl-kept')}"

    assert store.revoke("ttl-kept") is True
    assert store.revoke("ttl-kept") is False
    assert 0 < fake_redis.ttl(key) <= 301


def test_revoke_does_not_resurrect_a_vanished_record(store, fake_redis, monkeypatch):
    _create(store, "short-lived")
    key = f"rt:{hash_token('short-lived')}"
    original = Pipeline.pttl
    calls = {"n": 0}

    def pttl_then_expire(self, name):
        result = original(self, name)
        calls["n"] += 1
        if calls["n"] == 1:
            fake_redis.delete(key)
        return result

    monkeypatch.setattr(Pipeline, "pttl", pttl_then_expire)

    assert store.revoke("short-lived") is False
    assert fake_redis.exists(key) == 0


def test_revoke_all_catches_a_rotation_racing_the_index_read(store, fake_redis, monkeypatch):
    now = _now()
    _create(store, "legit", user_id=7, now=now)
    original = Pipeline.smembers
    calls = {"n": 0}

    def smembers_then_rotate(self, name):
        members = original(self, name)
        calls["n"] += 1
        if calls["n"] == 1:
            store.consume(
                "legit",
                now=now,
                replacement=RefreshGrant(
                    token="fresh", issued_at=now, expires_at=now + timedelta(hours=1)
                ),
            )
        return members

    monkeypatch.setattr(Pipeline, "smembers", smembers_then_rotate)

    assert store.revoke_all_for_user(7) == 2
    assert store.get("fresh").revoked is True
    assert store.consume("fresh", now=_now()).result is ConsumeResult.REVOKED
    assert fake_redis.smembers("rt:u:7") == set()


def test_revoke_all_only_removes_the_members_it_read(store, fake_redis):
    _create(store, "a1", user_id=8)

    store.revoke_all_for_user(8)
    _create(store, "a2", user_id=8)

    assert {m.decode() for m in fake_redis.smembers("rt:u:8")} == {hash_token("a2")}


def test_concurrent_consumers_have_exactly_one_winner(store):
    now = _now()
    _create(store, "contended", user_id=3, now=now)
    workers = 8
    barrier = threading.Barrier(workers)
    results: list[ConsumeResult] = []
    lock = threading.Lock()

    def worker(n: int):
        barrier.wait()
        outcome = store.consume(
            "contended",
            now=now,
            replacement=RefreshGrant(
                token=f"child-{n}", issued_at=now, expires_at=now + timedelta(hours=1)
            ),
        )
        with lock:
            results.append(outcome.result)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(ConsumeResult.OK) == 1
    assert results.count(ConsumeResult.REUSED) == workers - 1
    assert len(list(store.list_user_sessions(3))) == 1
