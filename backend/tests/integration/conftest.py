"""Fixtures for HTTP-level tests."""

from __future__ import annotations

import pytest

from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.http import auth_headers, login


@pytest.fixture()
def user(session):
    """Persist and return a user instance."""
    return UserFactory()


@pytest.fixture()
def tokens(client, user) -> dict[str, str]:
    return login(client, user.email, DEFAULT_PASSWORD)


@pytest.fixture()
def auth_header(tokens) -> dict[str, str]:
    """Authorization header for authenticated requests."""
    return auth_headers(tokens["accessToken"])


@pytest.fixture()
def make_auth(client):
    """Log in a fresh user and return ``(user, headers)``."""

    def _make(**overrides):
        other = UserFactory(**overrides)
        pair = login(client, other.email, DEFAULT_PASSWORD)
        return other, auth_headers(pair["accessToken"])

    return _make
