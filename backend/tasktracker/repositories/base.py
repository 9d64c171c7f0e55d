"""Repository base class plus the sort/paginate helpers it is built on.

Repositories stage changes and flush; they never commit or roll back.
Callers only reach columns through three per-model whitelists: sortable,
filterable (equality) and updatable.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from tasktracker.core.extensions import db

E = TypeVar("E")

Columns = Mapping[str, InstrumentedAttribute[Any]]


@dataclass(slots=True)
class Pagination:
    """``page`` is 1-based; ``sort`` holds tokens such as ``"-due_date"``."""

    page: int
    limit: int
    sort: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Page(Generic[E]):
    items: Sequence[E]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        if not self.limit:
            return 0
        return -(-self.total // self.limit)


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """Turn ``"-field"`` / ``"field:desc"`` tokens into ``(field, descending)``.

    Blank tokens are skipped.
    """
    out: list[tuple[str, bool]] = []
    for token in raw:
        token = token.strip()
        desc = token.startswith("-")
        name, _, direction = token.lstrip("-").partition(":")
        if direction:
            desc = direction.strip().lower() == "desc"
        if name.strip():
            out.append((name.strip(), desc))
    return out


def apply_sorting(
    stmt: Select[Any],
    sortable: Columns,
    tokens: Iterable[str],
    *,
    pk_attr: InstrumentedAttribute[Any] | None,
) -> Select[Any]:
    """Order by the whitelisted tokens, then by primary key.

    Unknown tokens are dropped silently. The trailing primary key keeps
    ``OFFSET`` pages disjoint when sort keys tie.
    """
    orders = [
        sortable[name].desc() if desc else sortable[name].asc()
        for name, desc in parse_sort_tokens(tokens)
        if name in sortable
    ]
    if pk_attr is not None:
        orders.append(pk_attr.asc())
    return stmt.order_by(*orders) if orders else stmt


def paginate_select(
    session: Session, stmt: Select[Any], *, page: int, limit: int
) -> tuple[list[Any], int]:
    """Run ``stmt`` for one page and return ``(items, total)``.

    The total is counted over ``stmt`` with its ``ORDER BY`` removed.
    """
    page, limit = max(int(page), 1), max(int(limit), 1)
    total = session.execute(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar_one()
    rows = session.execute(stmt.limit(limit).offset((page - 1) * limit)).scalars().unique()
    return list(rows), int(total)


class BaseRepository(Generic[E]):
    """Persistence for one mapped model.

    Subclasses set ``model`` and override the whitelist hooks they need.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        # ``None`` means the Flask-scoped ``db.session``.
        self._session = session

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else cast(Session, db.session)

    # Whitelist hooks

    def _sortable_fields(self) -> Columns:
        return {}

    def _filterable_fields(self) -> Columns:
        return {}

    def _updatable_fields(self) -> set[str]:
        return set()

    @property
    def _pk(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _where_equal(self, stmt: Select[Any], filters: Mapping[str, Any] | None) -> Select[Any]:
        allowed = self._filterable_fields()
        for key, value in (filters or {}).items():
            if key in allowed:
                stmt = stmt.where(allowed[key] == value)
        return stmt

    # Writes

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key is assigned."""
        self.session.add(instance)
        self.session.flush()
        return instance

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.session.flush()

    def flush(self) -> None:
        self.session.flush()

    def assign_updates(self, instance: E, changes: Mapping[str, Any]) -> E:
        """Set whitelisted attributes (``@validates`` hooks fire) and flush.

        :raises ValueError: ``changes`` names a field outside the whitelist.
        """
        rejected = sorted(set(changes) - self._updatable_fields())
        if rejected:
            raise ValueError(f"Fields not updatable: {', '.join(rejected)}")
        for key, value in changes.items():
            setattr(instance, key, value)
        self.session.flush()
        return instance

    # Reads

    def get(self, entity_id: Any) -> E | None:
        return cast(E | None, self.session.get(self.model, entity_id))

    def get_for_update(self, entity_id: Any) -> E | None:
        """Load by primary key with ``SELECT ... FOR UPDATE``.

        SQLite has no row locks and ignores the clause.
        """
        if self._pk is None:
            raise RuntimeError(f"{type(self).__name__} has no 'id' column to lock on")
        stmt = select(self.model).where(self._pk == entity_id).with_for_update()
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def list(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Iterable[str] | None = None,
    ) -> list[E]:
        stmt = self._where_equal(select(self.model), filters)
        stmt = apply_sorting(stmt, self._sortable_fields(), sort or (), pk_attr=self._pk)
        return list(self.session.execute(stmt).scalars())

    def paginate_stmt(self, stmt: Select[Any], pagination: Pagination) -> Page[E]:
        """Sort and page a ``select`` of this model built by the caller."""
        stmt = apply_sorting(stmt, self._sortable_fields(), pagination.sort, pk_attr=self._pk)
        items, total = paginate_select(
            self.session, stmt, page=pagination.page, limit=pagination.limit
        )
        return Page(items=items, total=total, page=pagination.page, limit=pagination.limit)
