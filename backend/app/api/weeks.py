# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from app.api.deps import AuthDep
from app.db import SessionDep
from app.schemas.submission import SubmissionResponse, SubmitWeekPayload
from app.schemas.toil import (
    NormalizedDuration,
    NormalizeDurationsPayload,
    NormalizeDurationsResponse,
    SaveWeekPayload,
    WeekResponse,
)
from app.services import submission as submission_service
from app.services import toil_entry as entry_service
from app.services.time_codec import parse_duration, to_minutes

weeks_router = APIRouter(prefix="/toil/weeks", tags=["toil"])

durations_router = APIRouter(prefix="/toil/durations", tags=["toil"])


@weeks_router.get("/{week_start}", response_model=WeekResponse)
async def get_week(
    week_start: date,
    session: SessionDep,
    auth: AuthDep,
    user_id: uuid.UUID | None = Query(default=None),
) -> WeekResponse:
    """Get a TOIL week with running balances and rule checks."""
    return await entry_service.get_week(session, auth, week_start, user_id)


@weeks_router.put("/{week_start}/entries", response_model=WeekResponse)
async def save_week(
    week_start: date,
    payload: SaveWeekPayload,
    session: SessionDep,
    auth: AuthDep,
) -> WeekResponse:
    """Save edited days of the caller's week."""
    return await entry_service.save_week(session, auth, week_start, payload)


@weeks_router.post("/{week_start}/submit", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_week(
    week_start: date,
    session: SessionDep,
    auth: AuthDep,
    payload: SubmitWeekPayload | None = None,
) -> SubmissionResponse:
    """Submit the caller's week for approval."""
    return await submission_service.create_submission(session, auth, week_start, payload or SubmitWeekPayload())


@durations_router.post("/normalize", response_model=NormalizeDurationsResponse)
async def normalize_durations(payload: NormalizeDurationsPayload, auth: AuthDep) -> NormalizeDurationsResponse:
    """Run raw duration inputs through the codec."""
    items = []
    for raw in payload.inputs:
        canonical = parse_duration(raw)
        items.append(NormalizedDuration(input=raw, canonical=canonical, minutes=to_minutes(canonical)))
    return NormalizeDurationsResponse(items=items)
