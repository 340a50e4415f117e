"""End-to-end session flows through the Flask test client."""

from __future__ import annotations

from datetime import timedelta

import pytest

from blog_api.infra.jwt import FlaskJWTTokenIssuer
from tests.factories.user import DEFAULT_PASSWORD, AdminFactory, UserFactory
from tests.helpers.http import API, assert_problem, json_headers, login, register

PASSWORD = "Str0ng!Passw0rd"


@pytest.fixture()
def alice(client):
    resp = register(client, "alice", "a@x.com", PASSWORD)
    assert resp.status_code == 201, resp.get_data(as_text=True)
    return resp.get_json()["data"]


# ------------------------------ Register ---------------------------------- #
def test_register_returns_session_with_user_role(alice):
    assert alice["user"]["username"] == "alice"
    assert alice["user"]["email"] == "a@x.com"
    assert alice["user"]["role"] == "user"
    assert alice["token_type"] == "Bearer"
    assert alice["expires_in"] > 0
    assert alice["access_token"] and alice["refresh_token"]
    assert "password" not in alice["user"] and "password_hash" not in alice["user"]


def test_register_cannot_grant_admin(client):
    resp = register(client, "mallory", "m@x.com", PASSWORD, role="admin")

    assert resp.status_code == 201
    assert resp.get_json()["data"]["user"]["role"] == "user"


def test_register_duplicate_is_409(client, alice):
    body = assert_problem(
        register(client, "alice2", "A@X.com", PASSWORD), 409, "duplicate_identity"
    )
    assert body["detail"] == "Username or email already in use"


def test_register_weak_password_is_422(client):
    body = assert_problem(
        register(client, "bob", "b@x.com", "password"), 422, "validation_error"
    )
    assert "password" in body["details"]["errors"]


def test_register_missing_fields_is_422(client):
    resp = client.post(f"{API}/auth/register", json={"username": "x"}, headers=json_headers())
    assert_problem(resp, 422, "validation_error")


# -------------------------------- Login ----------------------------------- #
def test_login_with_username_or_email(client, alice):
    for value in ("alice", "a@x.com"):
        resp = login(client, value, PASSWORD)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["user"]["id"] == alice["user"]["id"]


def test_login_accepts_username_alias(client, alice):
    resp = client.post(
        f"{API}/auth/login",
        json={"username": "alice", "password": PASSWORD},
        headers=json_headers(),
    )
    assert resp.status_code == 200


def test_login_failures_share_one_response(client, alice):
    wrong = assert_problem(login(client, "alice", "Wr0ng!Passw0rd"), 401, "invalid_credentials")
    unknown = assert_problem(login(client, "nobody", PASSWORD), 401, "invalid_credentials")

    assert wrong["detail"] == unknown["detail"]


def test_login_factory_user(client, session):
    user = UserFactory()
    session.commit()

    resp = login(client, user.email, DEFAULT_PASSWORD)

    assert resp.status_code == 200


# ------------------------------- Refresh ---------------------------------- #
def _refresh(client, token: str):
    return client.post(
        f"{API}/auth/refresh", json={"refresh_token": token}, headers=json_headers()
    )


def test_refresh_rotates_and_detects_reuse(client, alice):
    first = _refresh(client, alice["refresh_token"])
    assert first.status_code == 200
    rotated = first.get_json()["data"]
    assert rotated["refresh_token"] != alice["refresh_token"]

    reuse = assert_problem(_refresh(client, alice["refresh_token"]), 401, "invalid_refresh_token")
    # The kill switch also revoked the rotated token
    revoked = assert_problem(
        _refresh(client, rotated["refresh_token"]), 401, "invalid_refresh_token"
    )
    assert reuse["detail"] == revoked["detail"]


def test_refresh_with_revoked_token_is_401(client, alice):
    resp = client.post(
        f"{API}/auth/logout",
        json={"refresh_token": alice["refresh_token"]},
        headers=json_headers(),
    )
    assert resp.status_code == 204

    assert_problem(_refresh(client, alice["refresh_token"]), 401, "invalid_refresh_token")


def test_refresh_unknown_token_is_401(client):
    assert_problem(_refresh(client, "not-a-real-token"), 401, "invalid_refresh_token")


def test_logout_is_idempotent(client, alice):
    for _ in range(2):
        resp = client.post(
            f"{API}/auth/logout",
            json={"refresh_token": alice["refresh_token"]},
            headers=json_headers(),
        )
        assert resp.status_code == 204


def test_logout_all_sessions(client, alice):
    second = login(client, "alice", PASSWORD).get_json()["data"]

    resp = client.post(
        f"{API}/auth/logout",
        json={"refresh_token": second["refresh_token"], "all_sessions": True},
        headers=json_headers(),
    )

    assert resp.status_code == 204
    assert_problem(_refresh(client, alice["refresh_token"]), 401, "invalid_refresh_token")


# ------------------------------- Auth gate -------------------------------- #
def test_me_requires_bearer(client):
    body = assert_problem(client.get(f"{API}/auth/me"), 401, "unauthorized")
    assert "token" not in body.get("details", {})


def test_me_returns_current_user(client, alice):
    resp = client.get(f"{API}/auth/me", headers=json_headers(alice["access_token"]))

    assert resp.status_code == 200
    assert resp.get_json()["data"]["username"] == "alice"


def test_me_loads_the_token_subject_from_the_store(client, session, auth):
    bob = UserFactory(username="bob")
    session.commit()
    token = auth.tokens.issue_access(user_id=bob.id, username="stale-name", role="user")

    resp = client.get(f"{API}/auth/me", headers=json_headers(token))

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["id"] == bob.id
    assert data["username"] == "bob"


@pytest.mark.parametrize("header", ["Bearer garbage", "Basic abc", "Bearer "])
def test_me_rejects_bad_credentials(client, header):
    resp = client.get(f"{API}/auth/me", headers={"Authorization": header})
    assert_problem(resp, 401, "unauthorized")


def test_me_rejects_expired_access_token(client, alice):
    expired = FlaskJWTTokenIssuer(access_ttl=timedelta(seconds=-1)).issue_access(
        user_id=alice["user"]["id"], username="alice", role="user"
    )

    resp = client.get(f"{API}/auth/me", headers=json_headers(expired))

    assert_problem(resp, 401, "unauthorized")


def test_sessions_lists_only_active_ones(client, alice):
    login(client, "alice", PASSWORD)
    _refresh(client, alice["refresh_token"])

    resp = client.get(f"{API}/auth/sessions", headers=json_headers(alice["access_token"]))

    assert resp.status_code == 200
    sessions = resp.get_json()["data"]
    assert len(sessions) == 2
    assert all(set(s) == {"issued_at", "expires_at"} for s in sessions)


# ---------------------------- Admin revocation ---------------------------- #
def test_admin_revokes_user_sessions(client, session, alice):
    AdminFactory(username="root", email="root@x.com")
    session.commit()
    admin = login(client, "root", DEFAULT_PASSWORD).get_json()["data"]

    resp = client.post(
        f"{API}/auth/users/{alice['user']['id']}/revoke",
        headers=json_headers(admin["access_token"]),
    )

    assert resp.status_code == 200
    assert resp.get_json()["data"]["revoked"] == 1
    assert_problem(_refresh(client, alice["refresh_token"]), 401, "invalid_refresh_token")


def test_non_admin_cannot_revoke(client, alice):
    resp = client.post(
        f"{API}/auth/users/{alice['user']['id']}/revoke",
        headers=json_headers(alice["access_token"]),
    )
    assert_problem(resp, 403, "forbidden")
