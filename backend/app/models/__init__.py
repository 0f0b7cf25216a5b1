from sqlmodel import SQLModel

from app.models.audit import AuditLog
from app.models.balance import TOILBalance
from app.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from app.models.entry import TOILEntry
from app.models.enums import (
    AuditAction,
    AuditEntityType,
    EntryStatus,
    SubmissionStatus,
    ViolationKind,
    WeekState,
)
from app.models.settings import TOILSettings
from app.models.submission import TOILSubmission

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "EntryStatus",
    "SQLModel",
    "SubmissionStatus",
    "TOILBalance",
    "TOILEntry",
    "TOILSettings",
    "TOILSubmission",
    "TimestampMixin",
    "UpdatedAtMixin",
    "UUIDBase",
    "ViolationKind",
    "WeekState",
]
