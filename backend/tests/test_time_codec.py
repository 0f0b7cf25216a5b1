"""Tests for the TOIL duration codec."""

from __future__ import annotations

import pytest

from app.services.time_codec import Duration, parse_duration, to_canonical, to_minutes

# ---------------------------------------------------------------------------
# parse_duration
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("8", "08:00"),
        ("8:30", "08:30"),
        ("8.5", "08:30"),
        ("0.25", "00:15"),
        (".5", "00:30"),
        ("16", "16:00"),
        ("16:00", "16:00"),
        (" 7:45 ", "07:45"),
    ],
)
def test_parse_accepts_loose_numeric_input(raw: str, expected: str) -> None:
    assert parse_duration(raw) == expected


def test_parse_rounds_to_nearest_quarter_hour() -> None:
    assert parse_duration("8:07") == "08:00"
    assert parse_duration("8:08") == "08:15"
    assert parse_duration("8:52") == "08:45"
    assert parse_duration("8:53") == "09:00"
    assert parse_duration("1.1") == "01:00"
    assert parse_duration("1.13") == "01:15"


@pytest.mark.parametrize(
    "raw",
    ["", "   ", "abc", "8:30:00", "8h", "-2", "-1:00", "17", "16:15", "16.5", "8:75", "1e2", ".", "nan"],
)
def test_parse_degrades_to_zero(raw: str) -> None:
    assert parse_duration(raw) == "00:00"


def test_parse_none_is_zero() -> None:
    assert parse_duration(None) == "00:00"


# ---------------------------------------------------------------------------
# to_minutes / to_canonical
# ---------------------------------------------------------------------------


def test_to_minutes_positive() -> None:
    assert to_minutes("08:30") == 510
    assert to_minutes("00:00") == 0
    assert to_minutes("120:15") == 7215


def test_to_minutes_parenthesized_is_negative() -> None:
    assert to_minutes("(08:30)") == -510


def test_to_minutes_leading_minus_is_negative() -> None:
    assert to_minutes("-02:15") == -135


def test_to_minutes_empty_and_malformed_are_zero() -> None:
    assert to_minutes("") == 0
    assert to_minutes(None) == 0
    assert to_minutes("garbage") == 0
    assert to_minutes("(8)") == 0


def test_to_canonical() -> None:
    assert to_canonical(30) == "00:30"
    assert to_canonical(0) == "00:00"
    assert to_canonical(-510) == "(08:30)"
    assert to_canonical(40 * 60) == "40:00"


def test_to_canonical_does_not_truncate_large_hours() -> None:
    assert to_canonical(125 * 60 + 5) == "125:05"
    assert to_canonical(-(100 * 60)) == "(100:00)"


@pytest.mark.parametrize("minutes", [0, 1, -1, 59, -59, 60, 510, -510, 2400, -6001, 99 * 60 + 59, 100 * 60])
def test_round_trip(minutes: int) -> None:
    assert to_minutes(to_canonical(minutes)) == minutes


# ---------------------------------------------------------------------------
# Duration value type
# ---------------------------------------------------------------------------


def test_duration_parse_and_str() -> None:
    d = Duration.parse("8.5")
    assert d.minutes == 510
    assert str(d) == "08:30"


def test_duration_from_canonical_negative() -> None:
    d = Duration.from_canonical("(01:00)")
    assert d.minutes == -60
    assert d.is_negative
    assert str(d) == "(01:00)"


def test_duration_arithmetic_and_ordering() -> None:
    earned = Duration.parse("3")
    used = Duration.parse("4:30")
    net = earned - used
    assert net == Duration(-90)
    assert str(net) == "(01:30)"
    assert -net == Duration(90)
    assert earned + used == Duration(450)
    assert used > earned


def test_duration_is_immutable() -> None:
    d = Duration(60)
    with pytest.raises(AttributeError):
        d.minutes = 30  # type: ignore[misc]
