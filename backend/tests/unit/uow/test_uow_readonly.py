import pytest
from sqlalchemy import text

from tasktracker.models.user import User
from tasktracker.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from tasktracker.uow import SQLAlchemyUnitOfWork as RWuow
from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_blocks_core_dml(self, session):
        """
        Ensure that raw SQL DML is blocked inside the RO UoW.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(
                text("UPDATE users SET username = :u WHERE id = -1"), {"u": "nobody"}
            )

    def test_allows_reads(self, session):
        with RWuow() as uow:
            uow.users.add(UserFactory.build())

        with ROuow() as uow:
            assert uow.session.query(User).count() >= 1

    def test_disallows_commit(self, session):
        """
        RO UoW must reject commit() by design.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_always_rolls_back_changes(self, session):
        """
        Any attempted modifications must not persist after RO UoW exits.
        """
        with RWuow() as uow:
            user = uow.users.add(UserFactory.build())
            user_id = user.id
            original_email = user.email

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            u = uow.session.get(User, user_id)
            u.email = "mutated-in-ro@example.com"
            uow.session.flush()

        with RWuow() as uow:
            assert uow.session.get(User, user_id).email == original_email

    def test_guards_are_removed_on_exit(self, session):
        with ROuow():
            pass

        with RWuow() as uow:
            uow.users.add(UserFactory.build())

    def test_owned_scope_hands_the_session_to_a_writer(self, session):
        session.commit()
        assert not session.in_transaction()

        with ROuow() as uow:
            assert uow._txn_ctx is not None
            assert uow.session.query(User).count() >= 0

        assert not session.in_transaction()

        with RWuow() as uow:
            user_id = uow.users.add(UserFactory.build(username="after-ro")).id

        with RWuow() as uow:
            assert uow.session.get(User, user_id).username == "after-ro"

    def test_owned_scope_releases_the_session_after_an_error(self, session):
        session.commit()

        with pytest.raises(RuntimeError, match="ORM flush blocked"), ROuow() as uow:
            uow.session.add(UserFactory.build())
            uow.session.flush()

        with RWuow() as uow:
            uow.users.add(UserFactory.build())
