"""Factory Boy base bound to the per-test SAVEPOINT session."""

from __future__ import annotations

import factory

_session = None


def bind_session(session) -> None:
    """Point every factory at ``session`` (``None`` unbinds)."""
    global _session
    _session = session


def current_session():
    if _session is None:
        raise RuntimeError("Factories need the 'session' fixture to be active.")
    return _session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Flushes rows so ids exist without committing the outer transaction."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = current_session
        sqlalchemy_session_persistence = "flush"
