# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from app.models.base import TimestampMixin, UUIDBase
from app.models.enums import SubmissionStatus

_ACTIVE_STATUSES = "status IN ('pending', 'approved')"


class TOILSubmission(UUIDBase, TimestampMixin, table=True):
    """A user's week of TOIL entries put forward for approval."""

    __tablename__ = "toil_submission"
    __table_args__ = (
        # At most one pending-or-approved submission per user and week.
        sa.Index(
            "uq_toil_submission_active_week",
            "user_id",
            "week_start_date",
            unique=True,
            postgresql_where=sa.text(_ACTIVE_STATUSES),
            sqlite_where=sa.text(_ACTIVE_STATUSES),
        ),
        sa.Index("ix_toil_submission_status", "status"),
    )

    user_id: uuid.UUID = Field(index=True)
    week_start_date: datetime.date
    week_end_date: datetime.date
    status: str = Field(default=SubmissionStatus.PENDING, max_length=20)
    comments: str | None = None
    submitted_at: datetime.datetime = Field(sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    decided_at: datetime.datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    decided_by: uuid.UUID | None = None
    decision_note: str | None = None
    cancelled_at: datetime.datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
