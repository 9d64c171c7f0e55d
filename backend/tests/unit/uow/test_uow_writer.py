"""
Unit tests for SQLAlchemyUnitOfWork (writer), using factories.
"""

from __future__ import annotations

import pytest

from tasktracker.models import User
from tasktracker.uow import SQLAlchemyUnitOfWork
from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, session):
        """
        GIVEN a writer UoW
        WHEN we create a user via repo inside the context and leave without exception
        THEN the transaction is committed and the row is visible afterwards.
        """
        initial = session.query(User).count()

        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())

        session.rollback()  # a committed row survives a later rollback
        assert session.query(User).count() == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, session):
        """
        GIVEN a writer UoW
        WHEN an exception is raised inside the context
        THEN the transaction is rolled back and no rows are persisted.
        """
        initial = session.query(User).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())
            raise RuntimeError("boom")

        assert session.query(User).count() == initial

    def test_repositories_share_the_session(self, session):
        with SQLAlchemyUnitOfWork() as uow:
            assert uow.users.session is uow.tasks.session is uow.categories.session
            assert uow.sessions.session is uow.session
