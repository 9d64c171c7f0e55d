"""Contract tests shared by every :class:`SessionStore` adapter."""

from __future__ import annotations

import threading
from datetime import timedelta

import fakeredis
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import scoped_session, sessionmaker

from tasktracker.infra.redis.redis_session_store import RedisSessionStore
from tasktracker.infra.sql.sql_session_store import SQLSessionStore
from tasktracker.services._shared.clock import now_utc
from tasktracker.services._shared.ports import InMemorySessionStore, hash_token
from tests.factories.user import UserFactory


@pytest.fixture(params=["memory", "sql", "redis"])
def store(request, session):
    if request.param == "memory":
        return InMemorySessionStore()
    if request.param == "sql":
        return SQLSessionStore()
    return RedisSessionStore(fakeredis.FakeRedis())


@pytest.fixture()
def user_id(session) -> int:
    return UserFactory().id


@pytest.fixture()
def other_user_id(session) -> int:
    return UserFactory().id


def _in(hours: float):
    return now_utc() + timedelta(hours=hours)


class TestSessionStoreContract:
    def test_put_then_find_valid(self, store, user_id):
        record = store.put(user_id, "raw-token-1", _in(1))

        found = store.find_valid("raw-token-1")

        assert found is not None
        assert found.principal_id == user_id
        assert found.token_hash == hash_token("raw-token-1") == record.token_hash
        assert found.revoked is False

    def test_unknown_token_is_not_found(self, store):
        assert store.find_valid("never-issued") is None

    def test_revoke_flips_exactly_once(self, store, user_id):
        record = store.put(user_id, "raw-token-2", _in(1))

        assert store.revoke(record) is True
        assert store.revoke(record) is False
        assert store.find_valid("raw-token-2") is None

    def test_expired_record_is_not_valid(self, store, user_id):
        store.put(user_id, "raw-token-3", _in(-1))

        assert store.find_valid("raw-token-3") is None

    def test_find_valid_honours_explicit_now(self, store, user_id):
        store.put(user_id, "raw-token-4", _in(1))

        assert store.find_valid("raw-token-4", now=_in(2)) is None
        assert store.find_valid("raw-token-4", now=now_utc()) is not None

    def test_revoke_all_for_one_principal(self, store, user_id, other_user_id):
        store.put(user_id, "a-1", _in(1))
        store.put(user_id, "a-2", _in(1))
        store.put(other_user_id, "b-1", _in(1))

        assert store.revoke_all_for(user_id) == 2
        assert store.revoke_all_for(user_id) == 0
        assert store.find_valid("a-1") is None
        assert store.find_valid("a-2") is None
        assert store.find_valid("b-1") is not None

    def test_sweep_removes_only_expired(self, store, user_id):
        store.put(user_id, "old", _in(-1))
        store.put(user_id, "fresh", _in(1))

        assert store.sweep_expired() == 1
        assert store.find_valid("fresh") is not None
        assert store.sweep_expired() == 0


@pytest.fixture()
def file_engine(db, tmp_path):
    """File-backed SQLite engine whose transactions take the write lock up front."""
    engine = create_engine(f"sqlite:///{tmp_path / 'sessions.db'}", connect_args={"timeout": 10})

    @event.listens_for(engine, "connect")
    def _manual_begin(dbapi_conn, _record):
        dbapi_conn.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    db.metadata.create_all(engine)
    yield engine
    engine.dispose()


class TestSQLSessionStore:
    def test_concurrent_revoke_has_a_single_winner(self, db, session, monkeypatch, file_engine):
        scoped = scoped_session(sessionmaker(bind=file_engine))
        monkeypatch.setattr(db, "session", scoped)
        store = SQLSessionStore()
        record = store.put(1, "contended", _in(1))
        scoped.remove()

        barrier = threading.Barrier(2)
        results: list[bool] = []
        lock = threading.Lock()

        def attempt():
            barrier.wait()
            try:
                won = store.revoke(record)
            finally:
                scoped.remove()
            with lock:
                results.append(won)

        threads = [threading.Thread(target=attempt) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(results, reverse=True) == [True, False]
        assert store.find_valid("contended") is None
        scoped.remove()


class TestInMemorySessionStore:
    def test_concurrent_revoke_has_a_single_winner(self):
        store = InMemorySessionStore()
        record = store.put(1, "contended", _in(1))
        workers = 16
        barrier = threading.Barrier(workers)
        results: list[bool] = []
        lock = threading.Lock()

        def attempt():
            barrier.wait()
            won = store.revoke(record)
            with lock:
                results.append(won)

        threads = [threading.Thread(target=attempt) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1
        assert results.count(False) == workers - 1

    def test_len_counts_records(self):
        store = InMemorySessionStore()
        store.put(1, "x", _in(1))
        store.put(1, "y", _in(1))

        assert len(store) == 2


class TestRedisSessionStore:
    def test_layout_and_ttl(self):
        r = fakeredis.FakeRedis()
        store = RedisSessionStore(r)

        record = store.put(7, "redis-raw", _in(1))

        key = f"sess:{record.token_hash}"
        assert r.hget(key, "revoked") == b"0"
        assert 0 < r.ttl(key) <= 3600
        assert r.sismember("sess:u:7", record.token_hash)

    def test_revoke_of_vanished_key_loses(self):
        r = fakeredis.FakeRedis()
        store = RedisSessionStore(r)
        record = store.put(7, "gone", _in(1))
        r.delete(f"sess:{record.token_hash}")

        assert store.revoke(record) is False
