from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from app.config import get_settings
from app.exceptions import AppError
from app.models.balance import TOILBalance
from app.models.entry import TOILEntry
from app.models.enums import AuditAction, AuditEntityType, EntryStatus
from app.models.settings import TOILSettings
from app.schemas.balance import BalanceResponse, SettingsResponse
from app.services.audit import model_to_audit_dict, write_audit_log
from app.services.time_codec import to_canonical, to_minutes
from app.services.toil_balance import net_minutes
from app.services.toil_validation import BalanceLimits

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.schemas.auth import AuthContext
    from app.schemas.balance import UpdateSettingsPayload

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = uuid.UUID(int=0)


@dataclass
class ReconcileRunResult:
    """Result of a balance reconciliation run."""

    processed: int = 0
    changed: int = 0
    errors: int = 0


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_balance_response(balance: TOILBalance) -> BalanceResponse:
    return BalanceResponse(
        user_id=balance.user_id,
        total_hours=balance.total_hours,
        total_minutes=to_minutes(balance.total_hours),
        updated_at=balance.updated_at,
        version=balance.version,
    )


async def _sum_approved_minutes(session: AsyncSession, user_id: uuid.UUID) -> int:
    """Net minutes across every approved entry the user has."""
    result = await session.execute(
        select(TOILEntry).where(
            col(TOILEntry.user_id) == user_id,
            col(TOILEntry.status) == EntryStatus.APPROVED.value,
        )
    )
    return sum(net_minutes(entry) for entry in result.scalars().all())


async def _get_or_create_balance(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> TOILBalance:
    """Fetch the user's snapshot, creating a zero one on first access."""
    query = select(TOILBalance).where(col(TOILBalance.user_id) == user_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    balance = result.scalar_one_or_none()

    if balance is None:
        balance = TOILBalance(user_id=user_id)
        session.add(balance)
        await session.flush()
        logger.info("Created default TOIL balance for user %s", user_id)

    return balance


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------


async def load_balance(session: AsyncSession, user_id: uuid.UUID) -> TOILBalance:
    """Return the user's TOIL balance snapshot (the week carry-in)."""
    return await _get_or_create_balance(session, user_id)


async def get_balance(session: AsyncSession, user_id: uuid.UUID) -> BalanceResponse:
    balance = await load_balance(session, user_id)
    await session.commit()
    return _build_balance_response(balance)


async def rebuild_balance(session: AsyncSession, user_id: uuid.UUID, actor_id: uuid.UUID) -> TOILBalance:
    """Recompute the snapshot from approved entries within the caller's transaction.

    Returns the locked snapshot; the caller commits.
    """
    balance = await _get_or_create_balance(session, user_id, for_update=True)
    total = to_canonical(await _sum_approved_minutes(session, user_id))
    if total == balance.total_hours:
        return balance

    before_dict = model_to_audit_dict(balance)
    balance.total_hours = total
    balance.version += 1
    balance.updated_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.BALANCE,
        entity_id=user_id,
        action=AuditAction.UPDATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(balance),
    )
    logger.info("TOIL balance for user %s is now %s", user_id, total)
    return balance


async def run_balance_reconciliation(session: AsyncSession) -> ReconcileRunResult:
    """Rebuild every user's snapshot from approved entries, one commit per user."""
    result = ReconcileRunResult()
    users = await session.execute(select(TOILEntry.user_id).distinct())
    user_ids = [row[0] for row in users.all()]

    for user_id in user_ids:
        result.processed += 1
        try:
            balance = await _get_or_create_balance(session, user_id)
            version_before = balance.version
            balance = await rebuild_balance(session, user_id, SYSTEM_ACTOR)
            await session.commit()
            if balance.version != version_before:
                result.changed += 1
        except Exception:
            await session.rollback()
            result.errors += 1
            logger.exception("Balance reconciliation failed for user %s", user_id)

    return result


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def _default_settings_response(user_id: uuid.UUID) -> SettingsResponse:
    settings = get_settings()
    return SettingsResponse(
        user_id=user_id,
        max_capacity=to_canonical(settings.toil_max_balance_minutes),
        max_streak_hours=to_canonical(settings.toil_max_consecutive_reduction_minutes),
        max_streak_days=settings.toil_max_streak_days,
        is_default=True,
        updated_at=None,
    )


async def _get_settings_row(session: AsyncSession, user_id: uuid.UUID) -> TOILSettings | None:
    result = await session.execute(select(TOILSettings).where(col(TOILSettings.user_id) == user_id))
    return result.scalar_one_or_none()


async def load_limits(session: AsyncSession, user_id: uuid.UUID) -> BalanceLimits:
    """Balance limits for the user: their settings row, else app defaults."""
    row = await _get_settings_row(session, user_id)
    if row is None:
        settings = get_settings()
        return BalanceLimits(
            max_balance_minutes=settings.toil_max_balance_minutes,
            max_consecutive_reduction_minutes=settings.toil_max_consecutive_reduction_minutes,
        )
    return BalanceLimits(
        max_balance_minutes=to_minutes(row.max_capacity),
        max_consecutive_reduction_minutes=to_minutes(row.max_streak_hours),
    )


def _ensure_self_or_admin(auth: AuthContext, user_id: uuid.UUID) -> None:
    if not auth.can_access(user_id):
        raise AppError("Not authorized to view another user's TOIL settings", status_code=403)


async def get_user_settings(session: AsyncSession, auth: AuthContext, user_id: uuid.UUID) -> SettingsResponse:
    _ensure_self_or_admin(auth, user_id)
    row = await _get_settings_row(session, user_id)
    if row is None:
        return _default_settings_response(user_id)
    return SettingsResponse(
        user_id=row.user_id,
        max_capacity=row.max_capacity,
        max_streak_hours=row.max_streak_hours,
        max_streak_days=row.max_streak_days,
        is_default=False,
        updated_at=row.updated_at,
    )


async def update_user_settings(
    session: AsyncSession,
    auth: AuthContext,
    user_id: uuid.UUID,
    payload: UpdateSettingsPayload,
) -> SettingsResponse:
    """Create or replace a user's TOIL limits (admin only)."""
    row = await _get_settings_row(session, user_id)
    before_dict = model_to_audit_dict(row) if row is not None else None

    if row is None:
        row = TOILSettings(user_id=user_id)
        session.add(row)
    row.max_capacity = payload.max_capacity
    row.max_streak_hours = payload.max_streak_hours
    row.max_streak_days = payload.max_streak_days
    row.updated_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.SETTINGS,
        entity_id=user_id,
        action=AuditAction.CREATE if before_dict is None else AuditAction.UPDATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(row),
    )
    await session.commit()
    await session.refresh(row)
    return SettingsResponse(
        user_id=row.user_id,
        max_capacity=row.max_capacity,
        max_streak_hours=row.max_streak_hours,
        max_streak_days=row.max_streak_days,
        is_default=False,
        updated_at=row.updated_at,
    )
