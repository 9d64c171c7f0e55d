"""Refresh session repository: conditional revokes and expiry sweeps."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select, update

from tasktracker.models.session import RefreshSession
from tasktracker.repositories.base import BaseRepository


class RefreshSessionRepository(BaseRepository[RefreshSession]):
    """Persistence for :class:`RefreshSession` rows.

    Revocation is a compare-and-set ``UPDATE ... WHERE revoked = false``;
    the affected row count tells the caller whether it won.
    """

    model = RefreshSession

    def get_by_hash(self, token_hash: str) -> RefreshSession | None:
        stmt = select(RefreshSession).where(RefreshSession.token_hash == token_hash)
        return cast(RefreshSession | None, self.session.execute(stmt).scalars().first())

    def revoke_if_active(self, session_id: int) -> bool:
        stmt = (
            update(RefreshSession)
            .where(RefreshSession.id == session_id, RefreshSession.revoked.is_(False))
            .values(revoked=True)
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount == 1

    def revoke_all_for_user(self, user_id: int) -> int:
        stmt = (
            update(RefreshSession)
            .where(RefreshSession.user_id == user_id, RefreshSession.revoked.is_(False))
            .values(revoked=True)
            .execution_options(synchronize_session="fetch")
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def delete_expired(self, now: datetime) -> int:
        stmt = (
            delete(RefreshSession)
            .where(RefreshSession.expires_at <= now)
            .execution_options(synchronize_session="fetch")
        )
        return int(self.session.execute(stmt).rowcount or 0)
