# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from app.models.enums import SubmissionStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitWeekPayload(BaseModel):
    """Request body for submitting a week for approval."""

    comments: str | None = Field(default=None, max_length=1000)


class DecisionPayload(BaseModel):
    """Request body for approve/reject actions."""

    note: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SubmissionEntryResponse(BaseModel):
    """An entry as carried by a submission."""

    id: uuid.UUID
    date: date
    requested_hours: str
    used_hours: str
    status: str


class SubmissionResponse(BaseModel):
    """Response schema for a single TOIL submission."""

    id: uuid.UUID
    user_id: uuid.UUID
    week_start_date: date
    week_end_date: date
    status: SubmissionStatus
    comments: str | None
    submitted_at: datetime
    decided_at: datetime | None
    decided_by: uuid.UUID | None
    decision_note: str | None
    cancelled_at: datetime | None = None
    created_at: datetime
    entries: list[SubmissionEntryResponse] = []


class SubmissionListResponse(BaseModel):
    """Paginated list of TOIL submissions."""

    items: list[SubmissionResponse]
    total: int
