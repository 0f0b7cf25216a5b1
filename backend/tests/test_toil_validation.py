"""Tests for the balance rules validator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from app.models.enums import ViolationKind
from app.services.toil_balance import DailyBalance, recompute_week
from app.services.toil_validation import DEFAULT_LIMITS, BalanceLimits, BalanceViolation, can_submit, validate

DAY1 = date(2025, 1, 6)
DAY2 = date(2025, 1, 7)
DAY3 = date(2025, 1, 8)
DAY4 = date(2025, 1, 9)
DAY5 = date(2025, 1, 10)


@dataclass(frozen=True)
class _Day:
    date: date
    requested_hours: str = "00:00"
    used_hours: str = "00:00"


def _week(carry_in: int, *days: _Day) -> list[DailyBalance]:
    return recompute_week(carry_in, list(days))


# ---------------------------------------------------------------------------
# Balance bounds
# ---------------------------------------------------------------------------


def test_max_balance_exceeded() -> None:
    balances = _week(38 * 60, _Day(DAY1, requested_hours="03:00"))

    violations = validate(balances)

    assert violations == [
        BalanceViolation(date=DAY1, kind=ViolationKind.MAX_BALANCE, message="Balance exceeds 40 hours (41:00)"),
    ]


def test_max_balance_boundary_is_allowed() -> None:
    balances = _week(38 * 60, _Day(DAY1, requested_hours="02:00"))

    assert validate(balances) == []


def test_negative_balance() -> None:
    balances = _week(0, _Day(DAY1, used_hours="01:00"))

    violations = validate(balances)

    assert len(violations) == 1
    assert violations[0].kind is ViolationKind.MIN_BALANCE
    assert violations[0].date == DAY1
    assert violations[0].message == "Balance cannot be negative ((01:00))"


def test_zero_balance_is_allowed() -> None:
    balances = _week(60, _Day(DAY1, used_hours="01:00"))

    assert validate(balances) == []


def test_each_offending_day_is_reported() -> None:
    balances = _week(0, _Day(DAY1, used_hours="01:00"), _Day(DAY2), _Day(DAY3, requested_hours="02:00"))

    violations = validate(balances)

    # Day 2 stays at -1h, day 3 recovers.
    assert [(v.date, v.kind) for v in violations] == [
        (DAY1, ViolationKind.MIN_BALANCE),
        (DAY2, ViolationKind.MIN_BALANCE),
    ]


# ---------------------------------------------------------------------------
# Consecutive reduction
# ---------------------------------------------------------------------------


def test_reduction_resets_on_increase() -> None:
    balances = _week(
        20 * 60,
        _Day(DAY1, used_hours="10:00"),
        _Day(DAY2, requested_hours="02:00"),
        _Day(DAY3, used_hours="10:00"),
    )

    assert validate(balances) == []


def test_reduction_resets_on_flat_day() -> None:
    balances = _week(
        30 * 60,
        _Day(DAY1, used_hours="10:00"),
        _Day(DAY2),
        _Day(DAY3, used_hours="10:00"),
    )

    assert validate(balances) == []


def test_reduction_trips_on_third_reducing_day() -> None:
    balances = _week(
        20 * 60,
        _Day(DAY1),
        _Day(DAY2, used_hours="06:00"),
        _Day(DAY3, used_hours="06:00"),
        _Day(DAY4, used_hours="06:00"),
    )

    violations = validate(balances)

    assert violations == [
        BalanceViolation(
            date=DAY4,
            kind=ViolationKind.MAX_REDUCTION,
            message="Reduction exceeds 16 hours over consecutive days (18:00)",
        ),
    ]


def test_reduction_keeps_tripping_until_interrupted() -> None:
    balances = _week(
        30 * 60,
        _Day(DAY1),
        _Day(DAY2, used_hours="08:00"),
        _Day(DAY3, used_hours="08:15"),
        _Day(DAY4, used_hours="01:00"),
        _Day(DAY5, requested_hours="01:00"),
    )

    violations = validate(balances)

    assert [(v.date, v.kind) for v in violations] == [
        (DAY3, ViolationKind.MAX_REDUCTION),
        (DAY4, ViolationKind.MAX_REDUCTION),
    ]


def test_first_day_drawdown_is_not_counted() -> None:
    # Day one falls 10h from the carry-in; only day two's 8h accumulates.
    balances = _week(20 * 60, _Day(DAY1, used_hours="10:00"), _Day(DAY2, used_hours="08:00"))

    assert validate(balances) == []


def test_first_day_drawdown_does_not_seed_a_streak() -> None:
    balances = _week(
        30 * 60,
        _Day(DAY1, used_hours="08:00"),
        _Day(DAY2, used_hours="08:15"),
        _Day(DAY3, used_hours="01:00"),
    )

    assert validate(balances) == []


def test_reduction_counts_net_change_not_hours_used() -> None:
    # 20 hours used, but the balance only falls by 12.
    balances = _week(
        20 * 60,
        _Day(DAY1, requested_hours="04:00", used_hours="10:00"),
        _Day(DAY2, requested_hours="04:00", used_hours="10:00"),
    )

    assert validate(balances) == []


def test_one_day_can_break_several_rules() -> None:
    balances = _week(
        10 * 60,
        _Day(DAY1),
        _Day(DAY2, used_hours="08:00"),
        _Day(DAY3, used_hours="09:00"),
    )

    violations = validate(balances)

    assert {v.kind for v in violations if v.date == DAY3} == {
        ViolationKind.MIN_BALANCE,
        ViolationKind.MAX_REDUCTION,
    }
    assert all(v.date == DAY3 for v in violations)


def test_empty_week_is_valid() -> None:
    assert validate([]) == []
    assert can_submit([])


# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------


def test_default_limits() -> None:
    assert DEFAULT_LIMITS.max_balance_minutes == 2400
    assert DEFAULT_LIMITS.min_balance_minutes == 0
    assert DEFAULT_LIMITS.max_consecutive_reduction_minutes == 960


def test_custom_limits() -> None:
    limits = BalanceLimits(max_balance_minutes=20 * 60, max_consecutive_reduction_minutes=8 * 60 + 30)
    balances = _week(18 * 60, _Day(DAY1, requested_hours="03:00"), _Day(DAY2, used_hours="09:00"))

    violations = validate(balances, limits)

    assert [(v.date, v.kind) for v in violations] == [
        (DAY1, ViolationKind.MAX_BALANCE),
        (DAY2, ViolationKind.MAX_REDUCTION),
    ]
    assert violations[0].message == "Balance exceeds 20 hours (21:00)"
    assert violations[1].message == "Reduction exceeds 08:30 hours over consecutive days (09:00)"


def test_can_submit() -> None:
    assert can_submit(_week(60, _Day(DAY1, requested_hours="02:00")))
    assert not can_submit(_week(0, _Day(DAY1, used_hours="00:15")))


def test_validation_does_not_change_balances() -> None:
    balances = _week(0, _Day(DAY1, used_hours="05:00"))
    snapshot = list(balances)

    validate(balances)

    assert balances == snapshot


def test_violation_to_dict() -> None:
    violation = BalanceViolation(date=DAY1, kind=ViolationKind.MAX_BALANCE, message="Balance exceeds 40 hours (41:00)")

    assert violation.to_dict() == {
        "date": "2025-01-06",
        "kind": "maxBalance",
        "message": "Balance exceeds 40 hours (41:00)",
    }
