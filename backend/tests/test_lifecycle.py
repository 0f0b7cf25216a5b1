"""Tests for the TOIL week state machine."""

from __future__ import annotations

import pytest

from app.exceptions import InvalidTransitionError
from app.models.enums import EntryStatus, WeekState
from app.services import lifecycle


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (WeekState.DRAFT, WeekState.PENDING),
        (WeekState.PENDING, WeekState.DRAFT),
        (WeekState.PENDING, WeekState.APPROVED),
        (WeekState.PENDING, WeekState.REJECTED),
        (WeekState.REJECTED, WeekState.PENDING),
    ],
)
def test_allowed_transitions(current: WeekState, target: WeekState) -> None:
    assert lifecycle.can_transition(current, target)
    lifecycle.ensure_transition(current, target, "move")


@pytest.mark.parametrize(
    ("current", "target", "action"),
    [
        (WeekState.DRAFT, WeekState.DRAFT, "cancel"),
        (WeekState.DRAFT, WeekState.APPROVED, "approve"),
        (WeekState.PENDING, WeekState.PENDING, "submit"),
        (WeekState.APPROVED, WeekState.PENDING, "submit"),
        (WeekState.APPROVED, WeekState.DRAFT, "cancel"),
        (WeekState.REJECTED, WeekState.APPROVED, "approve"),
    ],
)
def test_rejected_transitions(current: WeekState, target: WeekState, action: str) -> None:
    assert not lifecycle.can_transition(current, target)
    with pytest.raises(InvalidTransitionError) as exc_info:
        lifecycle.ensure_transition(current, target, action)
    assert exc_info.value.status_code == 409
    assert exc_info.value.message == f"Cannot {action} a week that is {current.value}"


def test_approved_is_final() -> None:
    assert lifecycle.allowed_transitions(WeekState.APPROVED) == frozenset()


def test_editable_states() -> None:
    assert lifecycle.is_editable(WeekState.DRAFT)
    assert lifecycle.is_editable(WeekState.REJECTED)
    assert not lifecycle.is_editable(WeekState.PENDING)
    assert not lifecycle.is_editable(WeekState.APPROVED)


@pytest.mark.parametrize(
    ("statuses", "expected"),
    [
        ([], WeekState.DRAFT),
        (["cancelled"], WeekState.DRAFT),
        (["pending"], WeekState.PENDING),
        (["cancelled", "pending"], WeekState.PENDING),
        (["rejected"], WeekState.REJECTED),
        (["rejected", "cancelled"], WeekState.DRAFT),
        (["rejected", "approved"], WeekState.APPROVED),
        (["cancelled", "rejected"], WeekState.REJECTED),
    ],
)
def test_week_state_from_submission_history(statuses: list[str], expected: WeekState) -> None:
    assert lifecycle.week_state_from(statuses) is expected


def test_entry_status_follows_week() -> None:
    assert lifecycle.entry_status_for(WeekState.PENDING) is EntryStatus.PENDING
    assert lifecycle.entry_status_for(WeekState.DRAFT) is EntryStatus.DRAFT
