"""Category model: a per-owner grouping of tasks with a cached count."""

from __future__ import annotations

import re

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from tasktracker.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

DEFAULT_CATEGORY_COLOR = "#3B82F6"
HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


class Category(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Named bucket for tasks, owned by a single user.

    Fields
    ------
    name : str
        Unique per owner.
    color : str
        Hex color such as ``#3B82F6``.
    task_count : int
        Denormalized number of the owner's tasks pointing here. Only ever
        changed through atomic ``UPDATE`` deltas, never assigned directly.
    owner_id : int
        FK to :class:`User`.
    """

    __tablename__ = "categories"
    __repr_attrs__ = ("name",)

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str] = mapped_column(
        String(7), nullable=False, default=DEFAULT_CATEGORY_COLOR
    )
    task_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_categories_owner_name"),
        CheckConstraint("task_count >= 0", name="task_count_non_negative"),
        Index("ix_categories_owner_id", "owner_id"),
    )

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Category name is required.")
        return value.strip()

    @validates("color")
    def _validate_color(self, key: str, value: str | None) -> str:
        if value is None:
            return DEFAULT_CATEGORY_COLOR
        if not HEX_COLOR_RE.match(value):
            raise ValueError("Color must be a hex value like #3B82F6.")
        return value
