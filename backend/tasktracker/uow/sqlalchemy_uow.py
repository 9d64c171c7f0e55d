"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from tasktracker.core.extensions import db
from tasktracker.repositories import (
    CategoryRepository,
    RefreshSessionRepository,
    TaskRepository,
    UserRepository,
)
from tasktracker.uow.base import UnitOfWork

logger = logging.getLogger(__name__)

_READ_ONLY_DIALECTS = ("postgresql", "mysql", "mariadb")
_ISOLATION_LEVELS = ("READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE", "READ UNCOMMITTED")


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.tasks = TaskRepository(session=self.session)
        self.categories = CategoryRepository(session=self.session)
        self.sessions = RefreshSessionRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write UoW over the Flask-scoped session.

    Commits on a clean exit and rolls back when the block raises. All
    repositories share the same session, so a use-case is one transaction.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first use
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    - Applies ``SET TRANSACTION`` isolation / ``READ ONLY`` on dialects that
      support it, when this scope owns the transaction.
    - Installs write guards (ORM flush + raw DML) for the duration of the block.
    - Always rolls back an owned transaction on exit; ``commit()`` is refused.

    When a transaction is already open on the session (e.g. the test
    fixture's outer transaction) the scope attaches to it instead of
    beginning a new one; guards still apply but ``SET TRANSACTION`` is
    skipped.

    Parameters
    ----------
    isolation_level:
        Optional isolation hint such as ``"READ COMMITTED"``.
    enforce_db_readonly:
        Apply ``SET TRANSACTION READ ONLY`` where supported.
    """

    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
        "grant",
        "revoke",
    )

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._conn: Connection | None = None
        self._txn_ctx: SessionTransaction | None = None
        self._guarded_session: Session | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn_ctx = None
        try:
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx
        except InvalidRequestError:
            # Already inside a transaction: attach to it
            pass

        self._conn = self.session.connection()
        self._install_guards()

        if self._txn_ctx is not None and self._conn.dialect.name in _READ_ONLY_DIALECTS:
            self._apply_transaction_directives()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn_ctx is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                # Release the session's context-manager slot for the next scope
                try:
                    self._txn_ctx.__exit__(exc_type, exc, tb)
                finally:
                    self._txn_ctx = None
        finally:
            self._remove_guards()
            self._conn = None

    def commit(self) -> None:
        """
        :raises RuntimeError: always; this scope never writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Internals ---------------------------------

    def _apply_transaction_directives(self) -> None:
        try:
            if self.isolation_level:
                iso = self.isolation_level.upper().strip()
                if iso not in _ISOLATION_LEVELS:
                    logger.warning("Unknown isolation_level '%s'; attempting as-is.", iso)
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            logger.warning("SET TRANSACTION directives failed (%s); guards only.", exc)

    def _before_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")

    def _before_cursor_execute(
        self, conn, cursor, statement, parameters, context, executemany
    ) -> None:
        first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
        if first_token.startswith(self._WRITE_PREFIXES):
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}")

    def _install_guards(self) -> None:
        # Listen on the concrete Session, not the scoped_session registry
        session = self.session
        self._guarded_session = session() if callable(session) else session
        event.listen(self._guarded_session, "before_flush", self._before_flush)
        event.listen(self._conn, "before_cursor_execute", self._before_cursor_execute)

    def _remove_guards(self) -> None:
        if self._guarded_session is not None:
            event.remove(self._guarded_session, "before_flush", self._before_flush)
            self._guarded_session = None
        if self._conn is not None:
            event.remove(self._conn, "before_cursor_execute", self._before_cursor_execute)
