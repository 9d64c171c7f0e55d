# tasktracker/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param username: Public handle (unique).
    :param email: Login email (unique, normalized by the model).
    :param password: Raw password; hashed by the model setter.
    """

    username: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :param password: Raw password (to be verified).
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    refresh_token: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Credential pair handed to the client.

    :param access_token: Short-lived bearer token.
    :param refresh_token: Long-lived, single-use rotation token.
    :param expires_in: Access token lifetime in seconds.
    """

    access_token: str
    refresh_token: str
    expires_in: int


@dataclass(frozen=True, slots=True)
class PrincipalOut:
    """Public view of an authenticated user."""

    id: int
    username: str
    email: str
    role: str
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class RegistrationOut:
    user: PrincipalOut
    tokens: TokenPairOut
