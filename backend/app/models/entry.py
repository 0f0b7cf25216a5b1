# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from app.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from app.models.enums import EntryStatus
from app.services.time_codec import ZERO


class TOILEntry(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """One user's lieu time earned and used on a single calendar day."""

    __tablename__ = "toil_entry"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "date", name="uq_toil_entry_user_date"),
        sa.Index("ix_toil_entry_user_week", "user_id", "week_start_date"),
    )

    user_id: uuid.UUID = Field(index=True)
    date: datetime.date
    requested_hours: str = Field(default=ZERO, max_length=16)
    used_hours: str = Field(default=ZERO, max_length=16)
    status: str = Field(default=EntryStatus.DRAFT, max_length=20, sa_column_kwargs={"server_default": "draft"})
    week_start_date: datetime.date
    comments: str | None = None
    admin_comments: str | None = None
