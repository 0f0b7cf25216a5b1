# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from app.models.base import UpdatedAtMixin


class TOILSettings(UpdatedAtMixin, table=True):
    """Per-user overrides for the balance cap and consecutive-use limit."""

    __tablename__ = "toil_settings"

    user_id: uuid.UUID = Field(primary_key=True, sa_type=sa.Uuid)
    max_capacity: str = Field(default="40:00", max_length=16)
    max_streak_hours: str = Field(default="16:00", max_length=16)
    max_streak_days: int = Field(default=2)
