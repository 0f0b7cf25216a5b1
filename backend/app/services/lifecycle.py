"""Transition rules for a TOIL week.

A week with no active submission is a draft. Submitting moves it to pending;
from there an approver decides (approved or rejected) or the owner cancels
back to draft. A rejected week behaves like a draft and may be submitted
again. Approved is final.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.exceptions import InvalidTransitionError
from app.models.enums import EntryStatus, SubmissionStatus, WeekState

if TYPE_CHECKING:
    from collections.abc import Iterable

_TRANSITIONS: dict[WeekState, frozenset[WeekState]] = {
    WeekState.DRAFT: frozenset({WeekState.PENDING}),
    WeekState.PENDING: frozenset({WeekState.DRAFT, WeekState.APPROVED, WeekState.REJECTED}),
    WeekState.APPROVED: frozenset(),
    WeekState.REJECTED: frozenset({WeekState.PENDING}),
}

_EDITABLE_STATES = frozenset({WeekState.DRAFT, WeekState.REJECTED})


def allowed_transitions(state: WeekState) -> frozenset[WeekState]:
    """Return the states reachable from ``state`` in one step."""
    return _TRANSITIONS[state]


def can_transition(current: WeekState, target: WeekState) -> bool:
    return target in _TRANSITIONS[current]


def ensure_transition(current: WeekState, target: WeekState, action: str) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is legal."""
    if not can_transition(current, target):
        raise InvalidTransitionError(f"Cannot {action} a week that is {current.value}")


def is_editable(state: WeekState) -> bool:
    """Entries may only be changed while the week is a draft or was rejected."""
    return state in _EDITABLE_STATES


def week_state_from(submission_statuses: Iterable[str]) -> WeekState:
    """Derive the week's state from the statuses of all its submissions.

    An active (pending or approved) submission wins; otherwise the most
    recent decision is taken, with cancelled submissions ignored. The
    statuses must be ordered oldest first.
    """
    state = WeekState.DRAFT
    for raw in submission_statuses:
        status = SubmissionStatus(raw)
        if status is SubmissionStatus.PENDING:
            return WeekState.PENDING
        if status is SubmissionStatus.APPROVED:
            return WeekState.APPROVED
        if status is SubmissionStatus.REJECTED:
            state = WeekState.REJECTED
        elif status is SubmissionStatus.CANCELLED:
            state = WeekState.DRAFT
    return state


def entry_status_for(state: WeekState) -> EntryStatus:
    """Status the week's entries carry while the week is in ``state``."""
    return EntryStatus(state.value)
