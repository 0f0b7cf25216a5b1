# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from app.db import commit_or_raise
from app.exceptions import AppError, InvalidTransitionError, SubmissionValidationError
from app.models.entry import TOILEntry
from app.models.enums import AuditAction, AuditEntityType, SubmissionStatus, WeekState
from app.models.submission import TOILSubmission
from app.schemas.submission import SubmissionEntryResponse, SubmissionListResponse, SubmissionResponse
from app.services import lifecycle
from app.services.audit import model_to_audit_dict, write_audit_log
from app.services.balance import rebuild_balance
from app.services.toil_balance import DAYS_PER_WEEK, week_start_for
from app.services.toil_entry import evaluate_week, get_week_state, load_week

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthContext
    from app.schemas.submission import DecisionPayload, SubmitWeekPayload

logger = logging.getLogger(__name__)

_DUPLICATE_MESSAGE = "An active TOIL submission already exists for this week"

# Week state a submission's own status corresponds to.
_WEEK_STATE_FOR_STATUS = {
    SubmissionStatus.PENDING: WeekState.PENDING,
    SubmissionStatus.APPROVED: WeekState.APPROVED,
    SubmissionStatus.REJECTED: WeekState.REJECTED,
    SubmissionStatus.CANCELLED: WeekState.DRAFT,
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_submission_response(
    submission: TOILSubmission,
    entries: list[TOILEntry] | None = None,
) -> SubmissionResponse:
    """Map a submission model to its response schema."""
    return SubmissionResponse(
        id=submission.id,
        user_id=submission.user_id,
        week_start_date=submission.week_start_date,
        week_end_date=submission.week_end_date,
        status=SubmissionStatus(submission.status),
        comments=submission.comments,
        submitted_at=submission.submitted_at,
        decided_at=submission.decided_at,
        decided_by=submission.decided_by,
        decision_note=submission.decision_note,
        cancelled_at=submission.cancelled_at,
        created_at=submission.created_at,
        entries=[
            SubmissionEntryResponse(
                id=e.id,
                date=e.date,
                requested_hours=e.requested_hours,
                used_hours=e.used_hours,
                status=e.status,
            )
            for e in entries or []
        ],
    )


async def _get_submission_or_404(session: AsyncSession, submission_id: uuid.UUID) -> TOILSubmission:
    result = await session.execute(select(TOILSubmission).where(col(TOILSubmission.id) == submission_id))
    submission = result.scalar_one_or_none()
    if submission is None:
        raise AppError("Submission not found", status_code=404)
    return submission


def _ensure_visible(auth: AuthContext, submission: TOILSubmission) -> None:
    if not auth.can_access(submission.user_id):
        # Hide other users' submissions entirely.
        raise AppError("Submission not found", status_code=404)


async def _set_entry_statuses(
    session: AsyncSession,
    entries: list[TOILEntry],
    state: WeekState,
    admin_comments: str | None = None,
) -> None:
    """Move every entry of the week in lock-step with the week state."""
    status = lifecycle.entry_status_for(state).value
    now = datetime.now(UTC)
    for entry in entries:
        entry.status = status
        entry.updated_at = now
        if admin_comments is not None:
            entry.admin_comments = admin_comments
    await session.flush()


async def _transition(
    session: AsyncSession,
    auth: AuthContext,
    submission: TOILSubmission,
    new_status: SubmissionStatus,
    audit_action: AuditAction,
    note: str | None = None,
) -> SubmissionResponse:
    """Shared logic for cancel, approve and reject.

    1. Check the move is legal from the submission's current state.
    2. Update the submission and its entries.
    3. Rebuild the balance snapshot on approval.
    4. Audit log, commit.
    """
    current = _WEEK_STATE_FOR_STATUS[SubmissionStatus(submission.status)]
    target = _WEEK_STATE_FOR_STATUS[new_status]
    lifecycle.ensure_transition(current, target, audit_action.value.lower())

    before_dict = model_to_audit_dict(submission)
    entries = await load_week(session, submission.user_id, submission.week_start_date)

    submission.status = new_status.value
    if new_status is SubmissionStatus.CANCELLED:
        submission.cancelled_at = datetime.now(UTC)
    else:
        submission.decided_at = datetime.now(UTC)
        submission.decided_by = auth.user_id
        submission.decision_note = note
    await session.flush()

    await _set_entry_statuses(session, entries, target, admin_comments=note)

    if new_status is SubmissionStatus.APPROVED:
        await rebuild_balance(session, submission.user_id, auth.user_id)

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.SUBMISSION,
        entity_id=submission.id,
        action=audit_action,
        before_json=before_dict,
        after_json=model_to_audit_dict(submission),
    )

    await commit_or_raise(session)
    logger.info(
        "TOIL submission %s for user %s week %s is now %s",
        submission.id,
        submission.user_id,
        submission.week_start_date,
        new_status.value,
    )
    return _build_submission_response(submission, entries)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_submission(
    session: AsyncSession,
    auth: AuthContext,
    week_start: date,
    payload: SubmitWeekPayload,
) -> SubmissionResponse:
    """Submit the caller's week for approval.

    Flow:
    1. Resolve the week state; only draft or rejected weeks may be submitted.
    2. Require at least one stored entry.
    3. Recompute and validate the week; any violation refuses the submit.
    4. Insert the pending submission (the partial unique index backs up the
       single-active-submission rule against concurrent submits).
    5. Move the week's entries to pending.
    6. Audit log, commit.
    """
    monday = week_start_for(week_start)

    # 1. State guard.
    state, _ = await get_week_state(session, auth.user_id, monday)
    if state in (WeekState.PENDING, WeekState.APPROVED):
        raise InvalidTransitionError(f"{_DUPLICATE_MESSAGE} ({state.value})")
    lifecycle.ensure_transition(state, WeekState.PENDING, "submit")

    # 2. Entries.
    entries = await load_week(session, auth.user_id, monday)
    if not entries:
        raise AppError("No TOIL entries to submit for this week", status_code=400)

    # 3. Balance rules.
    _, _, _, violations = await evaluate_week(session, auth.user_id, monday)
    if violations:
        raise SubmissionValidationError("Please fix the validation errors before submitting", violations)

    # 4. Insert.
    submission = TOILSubmission(
        user_id=auth.user_id,
        week_start_date=monday,
        week_end_date=monday + timedelta(days=DAYS_PER_WEEK - 1),
        status=SubmissionStatus.PENDING.value,
        comments=payload.comments,
        submitted_at=datetime.now(UTC),
    )
    session.add(submission)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise AppError(_DUPLICATE_MESSAGE, status_code=409) from None

    # 5. Entries follow.
    await _set_entry_statuses(session, entries, WeekState.PENDING)

    # 6. Audit and commit.
    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.SUBMISSION,
        entity_id=submission.id,
        action=AuditAction.SUBMIT,
        after_json=model_to_audit_dict(submission),
    )
    await commit_or_raise(session, _DUPLICATE_MESSAGE)
    logger.info("User %s submitted TOIL week %s as %s", auth.user_id, monday, submission.id)
    return _build_submission_response(submission, entries)


async def cancel_submission(
    session: AsyncSession,
    auth: AuthContext,
    submission_id: uuid.UUID,
) -> SubmissionResponse:
    """Withdraw a pending submission; the week becomes an editable draft again.

    The owner or an admin can cancel.
    """
    submission = await _get_submission_or_404(session, submission_id)
    _ensure_visible(auth, submission)
    return await _transition(session, auth, submission, SubmissionStatus.CANCELLED, AuditAction.CANCEL)


async def decide_submission(
    session: AsyncSession,
    auth: AuthContext,
    submission_id: uuid.UUID,
    decision: SubmissionStatus,
    payload: DecisionPayload | None = None,
) -> SubmissionResponse:
    """Approve or reject a pending submission (approver side)."""
    if decision not in (SubmissionStatus.APPROVED, SubmissionStatus.REJECTED):
        raise AppError(f"Unsupported decision {decision.value}", status_code=400)
    submission = await _get_submission_or_404(session, submission_id)
    action = AuditAction.APPROVE if decision is SubmissionStatus.APPROVED else AuditAction.REJECT
    return await _transition(session, auth, submission, decision, action, note=payload.note if payload else None)


async def approve_submission(
    session: AsyncSession,
    auth: AuthContext,
    submission_id: uuid.UUID,
    payload: DecisionPayload | None = None,
) -> SubmissionResponse:
    return await decide_submission(session, auth, submission_id, SubmissionStatus.APPROVED, payload)


async def reject_submission(
    session: AsyncSession,
    auth: AuthContext,
    submission_id: uuid.UUID,
    payload: DecisionPayload | None = None,
) -> SubmissionResponse:
    return await decide_submission(session, auth, submission_id, SubmissionStatus.REJECTED, payload)


async def get_submission(
    session: AsyncSession,
    auth: AuthContext,
    submission_id: uuid.UUID,
) -> SubmissionResponse:
    """Get a single submission with the week's entries."""
    submission = await _get_submission_or_404(session, submission_id)
    _ensure_visible(auth, submission)
    entries = await load_week(session, submission.user_id, submission.week_start_date)
    return _build_submission_response(submission, entries)


async def list_submissions(
    session: AsyncSession,
    auth: AuthContext,
    user_id: uuid.UUID | None = None,
    status_filter: SubmissionStatus | None = None,
    offset: int = 0,
    limit: int = 50,
) -> SubmissionListResponse:
    """List submissions, newest first. Non-admins only ever see their own."""
    if not auth.is_admin:
        if user_id is not None and user_id != auth.user_id:
            raise AppError("Not authorized to list another user's submissions", status_code=403)
        user_id = auth.user_id

    base_filters = []
    if user_id is not None:
        base_filters.append(col(TOILSubmission.user_id) == user_id)
    if status_filter is not None:
        base_filters.append(col(TOILSubmission.status) == status_filter.value)

    count_result = await session.execute(select(func.count()).select_from(TOILSubmission).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(TOILSubmission)
        .where(*base_filters)
        .order_by(col(TOILSubmission.submitted_at).desc())
        .offset(offset)
        .limit(limit)
    )
    submissions = list(result.scalars().all())

    return SubmissionListResponse(
        items=[_build_submission_response(s) for s in submissions],
        total=total,
    )
