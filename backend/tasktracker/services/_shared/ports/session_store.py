from __future__ import annotations

import hashlib
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol
from uuid import uuid4

from tasktracker.services._shared.clock import as_utc, now_utc


def hash_token(raw_token: str) -> str:
    """Return the SHA-256 hex digest used as the storage key of a token."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """
    Snapshot of one server-side refresh session.

    :ivar id: Store-specific identifier.
    :ivar token_hash: SHA-256 of the raw refresh token.
    :ivar principal_id: Owning user id.
    :ivar expires_at: Absolute expiry (UTC).
    :ivar revoked: Flipped once, never back.
    :ivar created_at: Issuance instant (UTC).
    """

    id: str
    token_hash: str
    principal_id: int
    expires_at: datetime
    revoked: bool
    created_at: datetime

    def is_valid(self, now: datetime | None = None) -> bool:
        return not self.revoked and (now or now_utc()) < as_utc(self.expires_at)


class SessionStore(Protocol):
    """
    Server-side registry of issued refresh credentials.

    ``revoke`` MUST be a conditional update: it flips ``revoked`` only when
    the record is still unrevoked and reports whether *this* call did it.
    That answer is what makes refresh rotation single-use under concurrency.
    """

    def put(self, principal_id: int, raw_token: str, expires_at: datetime) -> SessionRecord:
        """Record a new session keyed by ``hash_token(raw_token)``."""

    def find_valid(self, raw_token: str, now: datetime | None = None) -> SessionRecord | None:
        """Return the record when it exists, is unrevoked and unexpired."""

    def revoke(self, record: SessionRecord) -> bool:
        """Conditionally revoke; ``True`` iff this call performed the flip."""

    def revoke_all_for(self, principal_id: int) -> int:
        """Revoke every unrevoked session of a principal; return how many flipped."""

    def sweep_expired(self, now: datetime | None = None) -> int:
        """Physically drop expired records; return how many were removed."""


class InMemorySessionStore(SessionStore):
    """
    Process-local session store.

    .. note::
       A single lock makes every operation atomic, which is enough for unit
       tests and single-process development servers.
    """

    def __init__(self) -> None:
        self._by_hash: dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def put(self, principal_id: int, raw_token: str, expires_at: datetime) -> SessionRecord:
        record = SessionRecord(
            id=uuid4().hex,
            token_hash=hash_token(raw_token),
            principal_id=int(principal_id),
            expires_at=as_utc(expires_at),
            revoked=False,
            created_at=now_utc(),
        )
        with self._lock:
            self._by_hash[record.token_hash] = record
        return record

    def find_valid(self, raw_token: str, now: datetime | None = None) -> SessionRecord | None:
        with self._lock:
            record = self._by_hash.get(hash_token(raw_token))
        if record is None or not record.is_valid(now):
            return None
        return record

    def revoke(self, record: SessionRecord) -> bool:
        with self._lock:
            current = self._by_hash.get(record.token_hash)
            if current is None or current.revoked:
                return False
            self._by_hash[record.token_hash] = replace(current, revoked=True)
            return True

    def revoke_all_for(self, principal_id: int) -> int:
        flipped = 0
        with self._lock:
            for key, record in self._by_hash.items():
                if record.principal_id == principal_id and not record.revoked:
                    self._by_hash[key] = replace(record, revoked=True)
                    flipped += 1
        return flipped

    def sweep_expired(self, now: datetime | None = None) -> int:
        now = now or now_utc()
        with self._lock:
            expired = [k for k, r in self._by_hash.items() if as_utc(r.expires_at) <= now]
            for key in expired:
                del self._by_hash[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._by_hash)
