"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside an outer transaction plus an anchor SAVEPOINT against
an in-memory SQLite database. The ORM session joins that connection with
``join_transaction_mode="create_savepoint"``, so service code may commit
freely while nothing leaks between cases.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy.orm import scoped_session, sessionmaker

from tasktracker.core.config import TestingConfig
from tasktracker.core.extensions import db as _db
from tasktracker.factory import create_app


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestingConfig)
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
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated connection open for the whole session.

    Flask-SQLAlchemy serves in-memory SQLite through a ``StaticPool``, so
    this is the same connection the tables were created on.
    """
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(autouse=True)
def app_context(app):
    """Push a fresh application context (and thus a fresh ``g``) per test."""
    with app.app_context() as ctx:
        yield ctx


@pytest.fixture(scope="function")
def session(db, connection, app_context):
    """Provide a SQLAlchemy session wrapped in a rolled-back transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection.

    Notes
    -----
    The anchor SAVEPOINT stays the outermost one for the whole test: on
    SQLite, releasing the outermost savepoint commits, so every session
    commit must land on a savepoint nested inside it.
    """
    outer = connection.begin()
    anchor = connection.begin_nested()

    factory = sessionmaker(
        bind=connection,
        autoflush=False,
        join_transaction_mode="create_savepoint",
    )
    scoped = scoped_session(factory)

    # Make app code (db.session) use this scoped session
    original_session = db.session
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        if anchor.is_active:
            anchor.rollback()
        outer.rollback()


@pytest.fixture()
def client(app, session):
    """Return a Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
    SQLAlchemySession.set(None)
