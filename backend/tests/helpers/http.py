"""HTTP helper utilities for tests."""

from __future__ import annotations

from urllib.parse import urlencode

API = "/api/v1"


def auth_headers(access_token: str) -> dict[str, str]:
    """Return the bearer header for ``access_token``."""
    return {"Authorization": f"Bearer {access_token}"}


def build_url(path: str, **query: str | int | float | None) -> str:
    """Build an API URL with encoded query parameters.

    Parameters
    ----------
    path:
        Endpoint path relative to the version root (e.g. ``"/tasks"``).
    **query:
        Query parameters to append; ``None`` values are dropped.
    """
    qs = urlencode({k: v for k, v in query.items() if v is not None})
    url = f"{API}{path}"
    return f"{url}?{qs}" if qs else url


def login(client, email: str, password: str) -> dict[str, str]:
    """Log in through the API and return the token pair payload."""
    resp = client.post(build_url("/auth/login"), json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


def assert_problem(resp, status: int, code: str) -> dict:
    """Assert an RFC 7807 error response and return its body."""
    assert resp.status_code == status, resp.get_json()
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["status"] == status
    assert body["code"] == code
    assert body["request_id"]
    return body
