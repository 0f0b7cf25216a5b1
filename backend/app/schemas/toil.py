# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import Self

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.enums import EntryStatus, ViolationKind, WeekState
from app.services.time_codec import ZERO, parse_duration

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class EntryInput(BaseModel):
    """One edited day. Hours are free-form and normalized on the way in."""

    date: date
    requested_hours: str = ZERO
    used_hours: str = ZERO

    @field_validator("requested_hours", "used_hours", mode="before")
    @classmethod
    def _normalize_hours(cls, value: object) -> str:
        if value is None:
            return parse_duration(None)
        return parse_duration(str(value))


class SaveWeekPayload(BaseModel):
    """Request body for saving edits to a week's entries."""

    entries: list[EntryInput] = Field(min_length=1, max_length=7)

    @model_validator(mode="after")
    def _unique_dates(self) -> Self:
        dates = [e.date for e in self.entries]
        if len(dates) != len(set(dates)):
            msg = "Each date may appear only once"
            raise ValueError(msg)
        return self


class NormalizeDurationsPayload(BaseModel):
    """Raw duration inputs to run through the codec."""

    inputs: list[str] = Field(min_length=1, max_length=100)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class DayResponse(BaseModel):
    """One day of a week, stored or placeholder."""

    entry_id: uuid.UUID | None
    date: date
    requested_hours: str
    used_hours: str
    status: EntryStatus
    net_minutes: int
    net_hours: str
    running_balance_minutes: int
    running_balance: str
    is_negative: bool


class ViolationResponse(BaseModel):
    """A broken balance rule attached to a day."""

    date: date
    kind: ViolationKind
    message: str


class WeekResponse(BaseModel):
    """A user's TOIL week with derived balances and rule checks."""

    user_id: uuid.UUID
    week_start_date: date
    week_end_date: date
    state: WeekState
    editable: bool
    carry_in_minutes: int
    carry_in: str
    days: list[DayResponse]
    violations: list[ViolationResponse]
    can_submit: bool
    submission_id: uuid.UUID | None = None


class NormalizedDuration(BaseModel):
    """Codec output for one raw input."""

    input: str
    canonical: str
    minutes: int


class NormalizeDurationsResponse(BaseModel):
    items: list[NormalizedDuration]
