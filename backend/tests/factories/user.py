"""Factory Boy definition for :class:`tasktracker.models.user.User`."""

from __future__ import annotations

import factory

from tasktracker.models.user import User, UserRole
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"


class UserFactory(BaseFactory):
    """Build persisted :class:`tasktracker.models.user.User` instances."""

    class Meta:
        model = User

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    username = factory.Sequence(lambda n: f"user{n}")
    role = UserRole.USER
    password_hash = factory.LazyFunction(lambda: "")  # set via postgen

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Set password using model setter (ensures hashing)."""
        obj.password = extracted or DEFAULT_PASSWORD
