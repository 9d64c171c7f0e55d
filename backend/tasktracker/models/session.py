"""Server-side refresh session records."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column

from tasktracker.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class RefreshSession(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    One issued refresh credential, identified by the SHA-256 of the token.

    The raw token is never persisted. ``revoked`` only moves from ``False``
    to ``True``; expired rows are deleted by the sweep job.
    """

    __tablename__ = "refresh_sessions"
    __repr_attrs__ = ("user_id", "revoked")

    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_refresh_sessions_token_hash"),
        Index("ix_refresh_sessions_user_id", "user_id"),
        Index("ix_refresh_sessions_expires_at", "expires_at"),
    )
