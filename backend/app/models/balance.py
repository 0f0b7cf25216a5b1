# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from app.models.base import UpdatedAtMixin
from app.services.time_codec import ZERO


class TOILBalance(UpdatedAtMixin, table=True):
    """Cumulative lieu balance snapshot, the carry-in for week computations."""

    __tablename__ = "toil_balance"

    user_id: uuid.UUID = Field(primary_key=True, sa_type=sa.Uuid)
    total_hours: str = Field(default=ZERO, max_length=16, sa_column_kwargs={"server_default": ZERO})
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
