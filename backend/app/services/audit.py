from __future__ import annotations

import uuid
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from app.models.audit import AuditLog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from app.models.enums import AuditAction, AuditEntityType


def _json_safe(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def model_to_audit_dict(model: SQLModel) -> dict[str, Any]:
    """Snapshot a TOIL row as a JSON-safe dict for the before/after columns."""
    return {key: _json_safe(value) for key, value in model.model_dump().items()}


async def write_audit_log(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID | str,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an audit row to the caller's transaction; the caller commits.

    Entries and submissions are keyed by their own id, balances and settings
    by the owning user's id.
    """
    row = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=str(entity_id),
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(row)
    return row

