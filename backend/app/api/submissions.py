# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from app.api.deps import AdminDep, AuthDep
from app.db import SessionDep
from app.models.enums import SubmissionStatus
from app.schemas.submission import DecisionPayload, SubmissionListResponse, SubmissionResponse
from app.services import submission as submission_service

submissions_router = APIRouter(prefix="/toil/submissions", tags=["submissions"])


@submissions_router.get("", response_model=SubmissionListResponse)
async def list_submissions(
    session: SessionDep,
    auth: AuthDep,
    user_id: uuid.UUID | None = Query(default=None),
    status_filter: SubmissionStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> SubmissionListResponse:
    """List TOIL submissions with optional filters."""
    return await submission_service.list_submissions(session, auth, user_id, status_filter, offset, limit)


@submissions_router.get("/{submission_id}", response_model=SubmissionResponse)
async def get_submission(
    submission_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> SubmissionResponse:
    """Get a single TOIL submission."""
    return await submission_service.get_submission(session, auth, submission_id)


@submissions_router.post("/{submission_id}/cancel", response_model=SubmissionResponse)
async def cancel_submission(
    submission_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> SubmissionResponse:
    """Cancel a pending TOIL submission."""
    return await submission_service.cancel_submission(session, auth, submission_id)


@submissions_router.post("/{submission_id}/approve", response_model=SubmissionResponse)
async def approve_submission(
    submission_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    payload: DecisionPayload | None = None,
) -> SubmissionResponse:
    """Approve a pending TOIL submission (admin only)."""
    return await submission_service.approve_submission(session, auth, submission_id, payload)


@submissions_router.post("/{submission_id}/reject", response_model=SubmissionResponse)
async def reject_submission(
    submission_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    payload: DecisionPayload | None = None,
) -> SubmissionResponse:
    """Reject a pending TOIL submission (admin only)."""
    return await submission_service.reject_submission(session, auth, submission_id, payload)
