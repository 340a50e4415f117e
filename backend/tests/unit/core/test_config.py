"""Configuration selection and the frozen auth settings snapshot."""

from __future__ import annotations

import dataclasses
from datetime import timedelta

import pytest

from blog_api.core.config import (
    AuthSettings,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    ensure_production_secrets,
    env_bool,
    get_config,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("production", ProductionConfig), ("TESTING", TestingConfig), ("nope", DevelopmentConfig)],
)
def test_get_config_reads_app_env(monkeypatch, value, expected):
    monkeypatch.setenv("APP_ENV", value)
    assert get_config() is expected


@pytest.mark.parametrize(("raw", "expected"), [("1", True), ("Yes", True), ("off", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("SOME_FLAG", raw)
    assert env_bool("SOME_FLAG") is expected


def test_auth_settings_from_mapping_defaults():
    settings = AuthSettings.from_mapping({})

    assert settings.access_ttl == timedelta(minutes=15)
    assert settings.refresh_ttl == timedelta(days=7)
    assert settings.refresh_store_backend == "sql"
    assert settings.redis_url is None


def test_auth_settings_are_frozen():
    settings = AuthSettings.from_mapping({"REFRESH_STORE_BACKEND": "Memory"})

    assert settings.refresh_store_backend == "memory"
    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.access_ttl = timedelta(seconds=1)  # type: ignore[misc]


@pytest.mark.parametrize(
    "config",
    [
        {"ACCESS_TOKEN_TTL_SECONDS": 0},
        {"ACCESS_TOKEN_TTL_SECONDS": 600, "REFRESH_TOKEN_TTL_SECONDS": 600},
        {"REFRESH_STORE_BACKEND": "mongo"},
    ],
)
def test_auth_settings_reject_bad_values(config):
    with pytest.raises(RuntimeError):
        AuthSettings.from_mapping(config)


def test_production_refuses_placeholder_secrets():
    with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
        ensure_production_secrets({"SECRET_KEY": "real", "JWT_SECRET_KEY": "CHANGE_ME_JWT"})


def test_placeholder_secrets_allowed_outside_production():
    ensure_production_secrets({"DEBUG": True, "SECRET_KEY": "CHANGE_ME"})
    ensure_production_secrets({"TESTING": True, "JWT_SECRET_KEY": "CHANGE_ME_JWT"})


def test_testing_config_uses_cheap_hashing():
    assert TestingConfig.PASSWORD_HASH_METHOD.startswith("pbkdf2")
    assert TestingConfig.RATELIMIT_ENABLED is False
