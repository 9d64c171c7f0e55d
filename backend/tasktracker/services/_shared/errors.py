"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They serve as stable contracts between repositories,
domain policies, and application services.

The translation to HTTP responses (RFC 7807) is handled by
``tasktracker/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name; SQLite reports the offending
    columns, so callers may pass either form.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        Constraint name (e.g. ``'uq_users_email'``) or a column reference
        such as ``'users.email'``.

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    - ``core.errors`` translates them to ``APIError`` at the boundary.
    """


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found (or is hidden from the caller).

    :param entity: Entity name (e.g., "Task").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class BadRequestError(ServiceError):
    """Raised when caller-supplied input violates a business rule."""

    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(message)


class AuthorizationError(ServiceError):
    """Raised when an authenticated principal may not touch a resource."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class UnauthorizedError(ServiceError):
    """Raised when a request carries no usable identity."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class InvalidCredentialsError(ServiceError):
    """
    Raised when login fails.

    The message is identical whether the email is unknown or the password
    is wrong.
    """

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class InvalidTokenError(ServiceError):
    """Raised when a bearer or refresh token is unusable for any reason."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


@dataclass(slots=True)
class InvalidStatusTransitionError(ServiceError):
    """
    Raised when a task status change is not in the transition table.

    :param current: Status the task is in.
    :param requested: Status the caller asked for.
    """

    current: str
    requested: str

    def __str__(self) -> str:
        return f"Cannot transition from {self.current} to {self.requested}"
