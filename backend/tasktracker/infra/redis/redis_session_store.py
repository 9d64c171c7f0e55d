# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]

from tasktracker.services._shared.clock import as_utc, now_utc
from tasktracker.services._shared.ports import SessionRecord, SessionStore, hash_token


def _b(value: bytes | str | None, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


def _to_ts(dt: datetime) -> int:
    return int(as_utc(dt).timestamp())


@dataclass(slots=True)
class RedisSessionStore(SessionStore):
    """
    Redis-backed session store.

    Layout
    ------
    ``sess:{token_hash}``
        Hash with ``principal_id``, ``expires_at``, ``created_at`` and
        ``revoked`` (``"0"``/``"1"``). Carries a TTL equal to the remaining
        lifetime, so Redis itself reclaims expired sessions.
    ``sess:u:{principal_id}``
        Set of token hashes, used for bulk revocation.

    The conditional revoke uses ``WATCH``/``MULTI``/``EXEC``: a concurrent
    writer aborts our transaction and the retry then observes ``revoked=1``.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    @staticmethod
    def _k(token_hash: str) -> str:
        return f"sess:{token_hash}"

    @staticmethod
    def _ku(principal_id: int | str) -> str:
        return f"sess:u:{principal_id}"

    def _load(self, token_hash: str) -> SessionRecord | None:
        h = self.r.hgetall(self._k(token_hash))
        if not h:
            return None
        return SessionRecord(
            id=token_hash,
            token_hash=token_hash,
            principal_id=int(_b(h.get(b"principal_id"), "0")),
            expires_at=datetime.fromtimestamp(int(_b(h.get(b"expires_at"), "0")), tz=UTC),
            revoked=_b(h.get(b"revoked"), "0") == "1",
            created_at=datetime.fromtimestamp(int(_b(h.get(b"created_at"), "0")), tz=UTC),
        )

    def _revoke_key(self, token_hash: str) -> bool:
        key = self._k(token_hash)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    current = p.hget(key, "revoked")
                    if current is None or _b(current) == "1":
                        p.unwatch()
                        return False
                    p.multi()
                    p.hset(key, "revoked", "1")
                    p.execute()
                    return True
            except redis.WatchError:
                continue

    # -------------------- API ------------------------

    def put(self, principal_id: int, raw_token: str, expires_at: datetime) -> SessionRecord:
        token_hash = hash_token(raw_token)
        now = now_utc()
        ttl = max(1, _to_ts(expires_at) - _to_ts(now))
        key = self._k(token_hash)

        pipe = self.r.pipeline(transaction=True)
        pipe.hset(
            key,
            mapping={
                "principal_id": str(int(principal_id)),
                "expires_at": str(_to_ts(expires_at)),
                "created_at": str(_to_ts(now)),
                "revoked": "0",
            },
        )
        pipe.expire(key, ttl)
        pipe.sadd(self._ku(principal_id), token_hash)
        pipe.execute()
        return SessionRecord(
            id=token_hash,
            token_hash=token_hash,
            principal_id=int(principal_id),
            expires_at=as_utc(expires_at),
            revoked=False,
            created_at=now,
        )

    def find_valid(self, raw_token: str, now: datetime | None = None) -> SessionRecord | None:
        record = self._load(hash_token(raw_token))
        if record is None or not record.is_valid(now):
            return None
        return record

    def revoke(self, record: SessionRecord) -> bool:
        return self._revoke_key(record.token_hash)

    def revoke_all_for(self, principal_id: int) -> int:
        key_u = self._ku(principal_id)
        flipped = 0
        for member in self.r.smembers(key_u):
            token_hash = _b(member)
            if self._revoke_key(token_hash):
                flipped += 1
            elif not self.r.exists(self._k(token_hash)):
                self.r.srem(key_u, token_hash)
        return flipped

    def sweep_expired(self, now: datetime | None = None) -> int:
        """
        Prune index entries whose session hash already expired.

        Redis TTLs remove the hashes themselves; ``now`` is accepted for
        interface parity and additionally drops hashes whose recorded expiry
        is in the past (e.g. after a clock jump).
        """
        cutoff = _to_ts(now or now_utc())
        removed = 0
        for key_u in self.r.scan_iter(match=self._ku("*")):
            for member in self.r.smembers(key_u):
                token_hash = _b(member)
                exp = self.r.hget(self._k(token_hash), "expires_at")
                if exp is None or int(_b(exp, "0")) <= cutoff:
                    pipe = self.r.pipeline(transaction=True)
                    pipe.delete(self._k(token_hash))
                    pipe.srem(key_u, token_hash)
                    pipe.execute()
                    removed += 1
        return removed
