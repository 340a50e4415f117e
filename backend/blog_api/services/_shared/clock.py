"""UTC clock helpers shared by services and stores."""

from __future__ import annotations

from datetime import UTC, datetime

from blog_api.services._shared.ports.refresh_token_store import as_utc

__all__ = ["as_utc", "utcnow"]


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)
