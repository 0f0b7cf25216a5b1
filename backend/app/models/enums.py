from __future__ import annotations

import enum


class EntryStatus(enum.StrEnum):
    """Status of a single day's TOIL entry, following its week."""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SubmissionStatus(enum.StrEnum):
    """Status of one submission of a week for approval."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class WeekState(enum.StrEnum):
    """State machine for a user's TOIL week."""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ViolationKind(enum.StrEnum):
    """Balance rule broken on a given day."""

    MAX_BALANCE = "maxBalance"
    MIN_BALANCE = "minBalance"
    MAX_REDUCTION = "maxReduction"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    ENTRY = "ENTRY"
    SUBMISSION = "SUBMISSION"
    BALANCE = "BALANCE"
    SETTINGS = "SETTINGS"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    SUBMIT = "SUBMIT"
    CANCEL = "CANCEL"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
