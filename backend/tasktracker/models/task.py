"""Task model, its status/priority enums and the sharing association."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Index, String, Table, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tasktracker.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000
TAG_MAX_LENGTH = 50


class TaskStatus(str, Enum):
    """Lifecycle states; see :mod:`tasktracker.services.tasks.lifecycle`."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


# Read-only grants: (task, user) pairs. The owner is never stored here.
task_shares = Table(
    "task_shares",
    db.metadata,
    Column("task_id", ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Index("ix_task_shares_user_id", "user_id"),
)


class Task(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Unit of work owned by one user and optionally readable by others.

    Fields
    ------
    title : str
        Required, at most 200 characters.
    description : str | None
        Optional, at most 2000 characters.
    status : TaskStatus
        Only changed through ``lifecycle.apply_status``.
    priority : TaskPriority
        Defaults to ``medium``.
    due_date : datetime | None
    category_id : int | None
        FK to :class:`Category`; nulled when the category is deleted.
    tags : list[str]
        Deduplicated, insertion ordered.
    estimated_hours : float | None
        Non-negative when present.
    completed_at : datetime | None
        Set iff ``status == completed``.
    owner_id : int
        FK to :class:`User`.
    shared_with : list[User]
        Principals granted read access.
    """

    __tablename__ = "tasks"
    __repr_attrs__ = ("title", "status")

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TaskStatus] = mapped_column(
        SAEnum(
            TaskStatus,
            name="enum_task_status",
            native_enum=False,
            create_constraint=True,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=TaskStatus.TODO,
    )
    priority: Mapped[TaskPriority] = mapped_column(
        SAEnum(
            TaskPriority,
            name="enum_task_priority",
            native_enum=False,
            create_constraint=True,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    estimated_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        Index("ix_tasks_owner_status", "owner_id", "status"),
        Index("ix_tasks_owner_priority", "owner_id", "priority"),
        Index("ix_tasks_owner_due_date", "owner_id", "due_date"),
        Index("ix_tasks_owner_category", "owner_id", "category_id"),
    )

    # Relationships
    shared_with: Mapped[list[User]] = relationship(
        "User", secondary=task_shares, lazy="selectin", order_by="User.id"
    )

    @property
    def shared_user_ids(self) -> set[int]:
        """Ids of the principals holding read access."""
        return {user.id for user in self.shared_with}

    # -------------------- Validators --------------------
    @validates("title")
    def _normalize_title(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Task title is required.")
        v = value.strip()
        if len(v) > TITLE_MAX_LENGTH:
            raise ValueError(f"Task title cannot exceed {TITLE_MAX_LENGTH} characters.")
        return v

    @validates("description")
    def _normalize_description(self, key: str, value: str | None) -> str | None:
        if value is None:
            return None
        v = value.strip()
        if len(v) > DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters."
            )
        return v

    @validates("tags")
    def _normalize_tags(self, key: str, value: list[str] | None) -> list[str]:
        # Set semantics, first occurrence wins
        seen: dict[str, None] = {}
        for raw in value or []:
            tag = str(raw).strip()
            if tag:
                seen.setdefault(tag, None)
        return list(seen)

    @validates("estimated_hours")
    def _validate_estimated_hours(self, key: str, value: float | None) -> float | None:
        if value is not None and value < 0:
            raise ValueError("Estimated hours must be a positive number.")
        return value
