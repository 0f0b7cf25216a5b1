"""Balance rules evaluated over a week of daily balances.

The validator only describes problems. Whether a problem blocks saving or
submitting is decided by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from itertools import pairwise
from typing import TYPE_CHECKING, Any

from app.models.enums import ViolationKind
from app.services.time_codec import to_canonical

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.services.toil_balance import DailyBalance


@dataclass(frozen=True)
class BalanceLimits:
    """Thresholds for the three balance rules, in minutes."""

    max_balance_minutes: int = 40 * 60
    min_balance_minutes: int = 0
    max_consecutive_reduction_minutes: int = 16 * 60


DEFAULT_LIMITS = BalanceLimits()


@dataclass(frozen=True)
class BalanceViolation:
    """A balance rule broken on a specific day."""

    date: date
    kind: ViolationKind
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "kind": self.kind.value, "message": self.message}


def _hours_label(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    return f"{hours} hours" if mins == 0 else f"{to_canonical(minutes)} hours"


def _check_bounds(balance: DailyBalance, limits: BalanceLimits) -> list[BalanceViolation]:
    found: list[BalanceViolation] = []
    running = balance.running_balance_minutes
    if running > limits.max_balance_minutes:
        found.append(
            BalanceViolation(
                date=balance.date,
                kind=ViolationKind.MAX_BALANCE,
                message=f"Balance exceeds {_hours_label(limits.max_balance_minutes)} ({to_canonical(running)})",
            )
        )
    if running < limits.min_balance_minutes:
        found.append(
            BalanceViolation(
                date=balance.date,
                kind=ViolationKind.MIN_BALANCE,
                message=f"Balance cannot be negative ({to_canonical(running)})",
            )
        )
    return found


def _check_consecutive_reduction(
    balances: Sequence[DailyBalance],
    limits: BalanceLimits,
) -> list[BalanceViolation]:
    """Flag days where an uninterrupted drawdown has gone past the limit.

    Walks adjacent days from the first day's closing balance, carrying the
    reduction accumulated so far. The first day itself is never a reduction.
    Any day whose balance is flat or rising resets the accumulator to zero.
    """
    found: list[BalanceViolation] = []
    consecutive_reduction = 0
    for previous, current in pairwise(balances):
        reduction = previous.running_balance_minutes - current.running_balance_minutes
        if reduction <= 0:
            consecutive_reduction = 0
            continue
        consecutive_reduction += reduction
        if consecutive_reduction > limits.max_consecutive_reduction_minutes:
            found.append(
                BalanceViolation(
                    date=current.date,
                    kind=ViolationKind.MAX_REDUCTION,
                    message=(
                        f"Reduction exceeds {_hours_label(limits.max_consecutive_reduction_minutes)} "
                        f"over consecutive days ({to_canonical(consecutive_reduction)})"
                    ),
                )
            )
    return found


def validate(
    daily_balances: Sequence[DailyBalance],
    limits: BalanceLimits = DEFAULT_LIMITS,
) -> list[BalanceViolation]:
    """Return every balance rule broken by the given days.

    A day may appear more than once when it breaks several rules. An empty
    list means the week is acceptable.
    """
    violations: list[BalanceViolation] = []
    for balance in daily_balances:
        violations.extend(_check_bounds(balance, limits))
    violations.extend(_check_consecutive_reduction(daily_balances, limits))
    return violations


def can_submit(daily_balances: Sequence[DailyBalance], limits: BalanceLimits = DEFAULT_LIMITS) -> bool:
    """True when the week breaks no balance rule."""
    return not validate(daily_balances, limits)
