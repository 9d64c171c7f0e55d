"""User repository for lookups used by authentication and sharing."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from tasktracker.models.user import User
from tasktracker.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Never issues tokens or sessions; only DB-level user management.
    """

    model = User

    def _sortable_fields(self):
        return {
            "id": User.id,
            "email": User.email,
            "username": User.username,
            "created_at": User.created_at,
        }

    def _filterable_fields(self):
        return {
            "email": User.email,
            "username": User.username,
        }

    def _updatable_fields(self):
        # Password and role are changed through dedicated paths only
        return {"email", "username"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :returns: User instance or ``None`` when not found.
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        return self.session.execute(stmt).first() is not None

    def exists_by_username(self, username: str) -> bool:
        stmt = select(User.id).where(User.username == username.strip())
        return self.session.execute(stmt).first() is not None

    def exists_by_id(self, user_id: int) -> bool:
        return self.session.execute(select(User.id).where(User.id == user_id)).first() is not None
