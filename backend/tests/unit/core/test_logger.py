"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from blog_api.core.logger import JSONFormatter, configure_logging, redact


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG")

    # Assert
    assert logging.getLogger().level == logging.DEBUG


def test_redact_masks_bearer_and_jwt() -> None:
    jwt_like = "eyJhbGciOiJIUzI1NiJ9.eyJpZCI6MX0.c2lnbmF0dXJl"

    assert "abc.def" not in redact("Authorization: Bearer abc.def")
    assert jwt_like not in redact(f"token={jwt_like}")


def test_json_formatter_emits_extras_and_redacts() -> None:
    record = logging.LogRecord(
        name="blog_api.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="presented Bearer secret-token",
        args=(),
        exc_info=None,
    )
    record.event = "refresh_reuse"
    record.user_id = 7

    payload = json.loads(JSONFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["event"] == "refresh_reuse"
    assert payload["user_id"] == 7
    assert "secret-token" not in payload["message"]
