# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from app.db import commit_or_raise
from app.exceptions import AppError, InvalidTransitionError, SubmissionValidationError
from app.models.entry import TOILEntry
from app.models.enums import AuditAction, AuditEntityType, EntryStatus
from app.models.submission import TOILSubmission
from app.schemas.toil import DayResponse, ViolationResponse, WeekResponse
from app.services import lifecycle
from app.services.audit import model_to_audit_dict, write_audit_log
from app.services.balance import load_balance, load_limits
from app.services.time_codec import ZERO, to_canonical, to_minutes
from app.services.toil_balance import (
    DAYS_PER_WEEK,
    WeekDay,
    fill_week,
    recompute_week,
    week_start_for,
)
from app.services.toil_validation import BalanceViolation, validate

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.models.enums import WeekState
    from app.schemas.auth import AuthContext
    from app.schemas.toil import SaveWeekPayload
    from app.services.toil_balance import DailyBalance

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


async def load_week(session: AsyncSession, user_id: uuid.UUID, week_start: date) -> list[TOILEntry]:
    """Stored entries for the week, oldest first. Missing days are not synthesized."""
    monday = week_start_for(week_start)
    result = await session.execute(
        select(TOILEntry)
        .where(
            col(TOILEntry.user_id) == user_id,
            col(TOILEntry.date) >= monday,
            col(TOILEntry.date) < monday + timedelta(days=DAYS_PER_WEEK),
        )
        .order_by(col(TOILEntry.date))
    )
    return list(result.scalars().all())


async def save_entry(
    session: AsyncSession,
    user_id: uuid.UUID,
    day: date,
    requested_hours: str,
    used_hours: str,
    *,
    actor_id: uuid.UUID | None = None,
) -> TOILEntry | None:
    """Upsert one day keyed by ``(user_id, day)`` within the caller's transaction.

    Hours must already be canonical. A day that was never stored and is still
    zero is not written and ``None`` is returned. Stored days are zeroed,
    never deleted.
    """
    result = await session.execute(
        select(TOILEntry).where(col(TOILEntry.user_id) == user_id, col(TOILEntry.date) == day)
    )
    entry = result.scalar_one_or_none()

    if entry is None:
        if to_minutes(requested_hours) == 0 and to_minutes(used_hours) == 0:
            return None
        entry = TOILEntry(
            user_id=user_id,
            date=day,
            requested_hours=requested_hours,
            used_hours=used_hours,
            status=EntryStatus.DRAFT.value,
            week_start_date=week_start_for(day),
        )
        session.add(entry)
        await session.flush()
        await write_audit_log(
            session,
            actor_id=actor_id or user_id,
            entity_type=AuditEntityType.ENTRY,
            entity_id=entry.id,
            action=AuditAction.CREATE,
            after_json=model_to_audit_dict(entry),
        )
        return entry

    if entry.requested_hours == requested_hours and entry.used_hours == used_hours:
        return entry

    before_dict = model_to_audit_dict(entry)
    entry.requested_hours = requested_hours
    entry.used_hours = used_hours
    entry.status = EntryStatus.DRAFT.value
    entry.updated_at = datetime.now(UTC)
    await session.flush()
    await write_audit_log(
        session,
        actor_id=actor_id or user_id,
        entity_type=AuditEntityType.ENTRY,
        entity_id=entry.id,
        action=AuditAction.UPDATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(entry),
    )
    return entry


async def load_week_submissions(
    session: AsyncSession,
    user_id: uuid.UUID,
    week_start: date,
) -> list[TOILSubmission]:
    """All submissions ever made for the week, oldest first."""
    result = await session.execute(
        select(TOILSubmission)
        .where(
            col(TOILSubmission.user_id) == user_id,
            col(TOILSubmission.week_start_date) == week_start_for(week_start),
        )
        .order_by(col(TOILSubmission.submitted_at), col(TOILSubmission.created_at))
    )
    return list(result.scalars().all())


async def get_week_state(
    session: AsyncSession,
    user_id: uuid.UUID,
    week_start: date,
) -> tuple[WeekState, TOILSubmission | None]:
    """The week's lifecycle state and its most relevant submission.

    The submission is the active one when the week is pending or approved,
    otherwise the latest one (or ``None`` when the week was never submitted).
    """
    submissions = await load_week_submissions(session, user_id, week_start)
    state = lifecycle.week_state_from(s.status for s in submissions)
    active = [s for s in submissions if s.status == state.value]
    if active:
        return state, active[-1]
    return state, submissions[-1] if submissions else None


# ---------------------------------------------------------------------------
# Week evaluation
# ---------------------------------------------------------------------------


def _build_week_response(
    user_id: uuid.UUID,
    monday: date,
    state: WeekState,
    carry_in_minutes: int,
    days: list[WeekDay],
    balances: list[DailyBalance],
    violations: list[BalanceViolation],
    submission: TOILSubmission | None,
) -> WeekResponse:
    by_date = {b.date: b for b in balances}
    return WeekResponse(
        user_id=user_id,
        week_start_date=monday,
        week_end_date=monday + timedelta(days=DAYS_PER_WEEK - 1),
        state=state,
        editable=lifecycle.is_editable(state),
        carry_in_minutes=carry_in_minutes,
        carry_in=to_canonical(carry_in_minutes),
        days=[
            DayResponse(
                entry_id=day.entry_id,
                date=day.date,
                requested_hours=day.requested_hours,
                used_hours=day.used_hours,
                status=EntryStatus(day.status),
                net_minutes=by_date[day.date].net_minutes,
                net_hours=by_date[day.date].net_hours,
                running_balance_minutes=by_date[day.date].running_balance_minutes,
                running_balance=by_date[day.date].running_balance,
                is_negative=by_date[day.date].is_negative,
            )
            for day in days
        ],
        violations=[ViolationResponse(date=v.date, kind=v.kind, message=v.message) for v in violations],
        can_submit=not violations,
        submission_id=submission.id if submission is not None else None,
    )


async def evaluate_week(
    session: AsyncSession,
    user_id: uuid.UUID,
    week_start: date,
    edits: dict[date, tuple[str, str]] | None = None,
) -> tuple[int, list[WeekDay], list[DailyBalance], list[BalanceViolation]]:
    """Recompute the week from storage, optionally with unsaved edits applied.

    Returns ``(carry_in_minutes, days, daily_balances, violations)``. Nothing
    is written.
    """
    stored = await load_week(session, user_id, week_start)
    balance = await load_balance(session, user_id)
    limits = await load_limits(session, user_id)

    days = fill_week(week_start, stored)
    if edits:
        days = [
            replace(day, requested_hours=edits[day.date][0], used_hours=edits[day.date][1])
            if day.date in edits
            else day
            for day in days
        ]

    carry_in = to_minutes(balance.total_hours)
    balances = recompute_week(carry_in, days)
    return carry_in, days, balances, validate(balances, limits)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _resolve_target_user(auth: AuthContext, user_id: uuid.UUID | None) -> uuid.UUID:
    if user_id is None:
        return auth.user_id
    if not auth.can_access(user_id):
        raise AppError("Not authorized to view another user's TOIL", status_code=403)
    return user_id


async def get_week(
    session: AsyncSession,
    auth: AuthContext,
    week_start: date,
    user_id: uuid.UUID | None = None,
) -> WeekResponse:
    """The week as the UI shows it: seven days, running balances and rule checks."""
    target = _resolve_target_user(auth, user_id)
    monday = week_start_for(week_start)
    carry_in, days, balances, violations = await evaluate_week(session, target, monday)
    state, submission = await get_week_state(session, target, monday)
    # load_balance may have created the default snapshot.
    await session.commit()
    return _build_week_response(target, monday, state, carry_in, days, balances, violations, submission)


async def save_week(
    session: AsyncSession,
    auth: AuthContext,
    week_start: date,
    payload: SaveWeekPayload,
) -> WeekResponse:
    """Save edited days of the caller's week.

    Refused when the week is pending or approved, and when the edited week
    would break a balance rule. Either the whole edit is stored or none of it.
    """
    monday = week_start_for(week_start)
    sunday = monday + timedelta(days=DAYS_PER_WEEK - 1)
    for item in payload.entries:
        if not monday <= item.date <= sunday:
            raise AppError(f"{item.date.isoformat()} is outside the week starting {monday.isoformat()}", 400)

    state, submission = await get_week_state(session, auth.user_id, monday)
    if not lifecycle.is_editable(state):
        raise InvalidTransitionError(f"Cannot edit a week that is {state.value}")

    edits = {item.date: (item.requested_hours or ZERO, item.used_hours or ZERO) for item in payload.entries}
    carry_in, days, balances, violations = await evaluate_week(session, auth.user_id, monday, edits)
    if violations:
        raise SubmissionValidationError("Please fix the validation errors before saving", violations)

    saved = 0
    for item_date, (requested, used) in sorted(edits.items()):
        entry = await save_entry(session, auth.user_id, item_date, requested, used)
        if entry is not None:
            saved += 1

    await commit_or_raise(session, "Entries were changed concurrently, please reload")
    logger.info("Saved %d TOIL entries for user %s, week %s", saved, auth.user_id, monday)

    carry_in, days, balances, violations = await evaluate_week(session, auth.user_id, monday)
    return _build_week_response(auth.user_id, monday, state, carry_in, days, balances, violations, submission)
