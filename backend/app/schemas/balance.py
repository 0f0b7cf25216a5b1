# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.services.time_codec import to_canonical, to_minutes

# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    """A user's TOIL balance snapshot."""

    user_id: uuid.UUID
    total_hours: str
    total_minutes: int
    updated_at: datetime | None
    version: int


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class SettingsResponse(BaseModel):
    """Effective TOIL limits for a user."""

    user_id: uuid.UUID
    max_capacity: str
    max_streak_hours: str
    max_streak_days: int
    is_default: bool
    updated_at: datetime | None


class UpdateSettingsPayload(BaseModel):
    """Request body for changing a user's TOIL limits.

    Values are ``HH:MM`` and may exceed a single day's 16 hours.
    """

    max_capacity: str = Field(pattern=r"^\d+:[0-5]\d$")
    max_streak_hours: str = Field(pattern=r"^\d+:[0-5]\d$")
    max_streak_days: int = Field(default=2, ge=1, le=7)

    @field_validator("max_capacity", "max_streak_hours")
    @classmethod
    def _canonicalize(cls, value: str) -> str:
        minutes = to_minutes(value)
        if minutes <= 0:
            msg = "Limit must be greater than 00:00"
            raise ValueError(msg)
        return to_canonical(minutes)
