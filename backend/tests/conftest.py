"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside an outer transaction against an in-memory SQLite
database; the application session joins it through SAVEPOINTs so commits made
by services never leak between cases.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from blog_api.core.config import TestingConfig
from blog_api.core.extensions import db as _db  # Flask-SQLAlchemy instance
from blog_api.factory import create_app  # application factory under test


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Cheap password hashing and the SQL refresh store.
    - Avoids hitting external services.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SECRET_KEY = "test-secret-key-with-enough-entropy-0123456789"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-entropy-0123456789"
    REFRESH_STORE_BACKEND = "sql"
    REDIS_URL = None
    RATELIMIT_ENABLED = False
    USE_PROXYFIX = False


def _enable_sqlite_savepoints(engine) -> None:
    """Let SQLAlchemy own BEGIN so SAVEPOINTs behave (pysqlite recipe)."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):  # pragma: no cover
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):  # pragma: no cover
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _enable_sqlite_savepoints(_db.engine)
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session joined to a per-test outer transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection. ``commit()`` releases
        a SAVEPOINT; the outer transaction is rolled back after the test.
    """
    # 1) Top-level transaction
    top_trans = connection.begin()

    # 2) Scoped session that turns commits into SAVEPOINT releases
    SessionFactory = sessionmaker(
        bind=connection, join_transaction_mode="create_savepoint", autoflush=False
    )
    scoped = scoped_session(SessionFactory)

    # 3) Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture()
def file_app(tmp_path):
    """App bound to a file-backed SQLite database, for tests that run real threads.

    Each thread pushes its own app context and so gets its own session and
    connection; the shared in-memory connection of :func:`session` cannot.
    """

    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'blog.db'}"

    threaded_app = create_app(FileConfig)
    threaded_app.logger.setLevel("WARNING")
    with threaded_app.app_context():
        _db.create_all()
    yield threaded_app
    with threaded_app.app_context():
        _db.session.remove()
        _db.drop_all()
        _db.engine.dispose()


@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional session.

    A fresh app context per test keeps ``flask.g`` from leaking across tests.
    """
    with app.app_context():
        yield app.test_client()


@pytest.fixture()
def auth(app, session):
    """Auth components (hasher, issuer, refresh store) built by the app."""
    from blog_api.core.container import EXTENSION_KEY

    return app.extensions[EXTENSION_KEY]


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import bind_session

    if "session" in request.fixturenames:
        bind_session(request.getfixturevalue("session"))
    yield
    bind_session(None)


@pytest.fixture()
def app_ctx(app):
    """Push an application context (JWT helpers need ``current_app``)."""
    with app.app_context() as ctx:
        yield ctx
