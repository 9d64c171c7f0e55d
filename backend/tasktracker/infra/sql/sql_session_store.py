from __future__ import annotations

import logging
from datetime import datetime

from tasktracker.models.session import RefreshSession
from tasktracker.services._shared.clock import as_utc, now_utc
from tasktracker.services._shared.ports import SessionRecord, SessionStore, hash_token
from tasktracker.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

logger = logging.getLogger(__name__)


def _to_record(row: RefreshSession) -> SessionRecord:
    return SessionRecord(
        id=str(row.id),
        token_hash=row.token_hash,
        principal_id=row.user_id,
        expires_at=as_utc(row.expires_at),
        revoked=bool(row.revoked),
        created_at=as_utc(row.created_at) if row.created_at else now_utc(),
    )


class SQLSessionStore(SessionStore):
    """
    Relational session store over the ``refresh_sessions`` table.

    Every call runs in its own read-write Unit of Work so that a successful
    conditional revoke is committed before the caller mints a replacement.
    Revocation relies on ``UPDATE ... WHERE revoked = false`` and the
    affected row count, which serializes concurrent callers on the row lock.
    """

    def put(self, principal_id: int, raw_token: str, expires_at: datetime) -> SessionRecord:
        with SQLAlchemyUnitOfWork() as uow:
            row = uow.sessions.add(
                RefreshSession(
                    token_hash=hash_token(raw_token),
                    user_id=int(principal_id),
                    expires_at=as_utc(expires_at),
                    revoked=False,
                    created_at=now_utc(),
                )
            )
            record = _to_record(row)
        return record

    def find_valid(self, raw_token: str, now: datetime | None = None) -> SessionRecord | None:
        with SQLAlchemyUnitOfWork() as uow:
            row = uow.sessions.get_by_hash(hash_token(raw_token))
            record = _to_record(row) if row is not None else None
        if record is None or not record.is_valid(now):
            return None
        return record

    def revoke(self, record: SessionRecord) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            flipped = uow.sessions.revoke_if_active(int(record.id))
        return flipped

    def revoke_all_for(self, principal_id: int) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            count = uow.sessions.revoke_all_for_user(int(principal_id))
        return count

    def sweep_expired(self, now: datetime | None = None) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            removed = uow.sessions.delete_expired(now or now_utc())
        if removed:
            logger.info("Swept expired refresh sessions", extra={"count": removed})
        return removed
