"""Column mixins shared by every persisted entity."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column


class PKMixin:
    """Integer surrogate key named ``id``."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class TimestampMixin:
    """Server-filled ``created_at`` / ``updated_at`` columns.

    Both are stored timezone-aware. SQLite drops the offset on the way back,
    so readers that compare instants go through
    :func:`tasktracker.services._shared.clock.as_utc`.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class ReprMixin:
    """Render ``<Model id=.. attr=..>`` from the names in ``__repr_attrs__``."""

    __repr_attrs__: ClassVar[tuple[str, ...]] = ()

    def __repr__(self) -> str:
        parts = [f"id={getattr(self, 'id', None)}"]
        parts += [f"{name}={getattr(self, name, None)!r}" for name in self.__repr_attrs__]
        return f"<{type(self).__name__} {' '.join(parts)}>"
