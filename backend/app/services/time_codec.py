"""Duration codec for TOIL hours.

Three representations are in play:

* free-form user input ("8", "8:30", "8.5", "")
* the canonical string stored and displayed everywhere: zero-padded
  ``HH:MM``, with negative values wrapped in parentheses, e.g. ``(08:30)``
* signed integer minutes, used for all arithmetic

Nothing in here raises on bad input. Text that cannot be understood is read
as zero so that keystroke-level input never blocks the user.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Self

ZERO = "00:00"

# A single day's entry is capped at 16 hours and snapped to quarter hours.
_MAX_DAILY_MINUTES = 16 * 60
_ROUNDING_MINUTES = 15

_INTEGER_RE = re.compile(r"^\d+$")
_DECIMAL_RE = re.compile(r"^(?=.*\d)\d*\.\d*$")
_HOURS_MINUTES_RE = re.compile(r"^(\d+):(\d+)$")


def _round_to_quarter(minutes: int) -> int:
    """Round to the nearest quarter hour, halves rounding up."""
    return (2 * minutes + _ROUNDING_MINUTES) // (2 * _ROUNDING_MINUTES) * _ROUNDING_MINUTES


def _format_magnitude(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def parse_duration(text: str | None) -> str:
    """Normalize user-entered duration text to canonical ``HH:MM``.

    Accepts whole hours ("8"), decimal hours ("8.5") and hours:minutes
    ("8:30"). The result is rounded to the nearest 15 minutes. Empty,
    malformed, negative or over-16-hour input yields ``"00:00"``.
    """
    if text is None:
        return ZERO
    value = text.strip()
    if not value:
        return ZERO

    if _DECIMAL_RE.match(value):
        hours = float(value)
        if hours > _MAX_DAILY_MINUTES / 60:
            return ZERO
        quarters = math.floor(hours * 4 + 0.5)
        return _format_magnitude(quarters * _ROUNDING_MINUTES)

    match = _HOURS_MINUTES_RE.match(value)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        if minutes > 59:
            return ZERO
        total = hours * 60 + minutes
        if total > _MAX_DAILY_MINUTES:
            return ZERO
        return _format_magnitude(_round_to_quarter(total))

    if _INTEGER_RE.match(value):
        hours = int(value)
        if hours * 60 > _MAX_DAILY_MINUTES:
            return ZERO
        return _format_magnitude(hours * 60)

    return ZERO


def to_minutes(duration: str | None) -> int:
    """Convert a canonical duration string to signed minutes.

    ``(HH:MM)`` and the legacy ``-HH:MM`` form are both negative. Empty or
    unreadable text is zero.
    """
    if not duration:
        return 0
    value = duration.strip()

    sign = 1
    if value.startswith("(") and value.endswith(")"):
        sign = -1
        value = value[1:-1].strip()
    elif value.startswith("-"):
        sign = -1
        value = value[1:].strip()

    match = _HOURS_MINUTES_RE.match(value)
    if match is None:
        return 0
    return sign * (int(match.group(1)) * 60 + int(match.group(2)))


def to_canonical(minutes: int) -> str:
    """Format signed minutes as ``HH:MM``, or ``(HH:MM)`` when negative.

    Hours are padded to two digits but never truncated (``100:00`` stays).
    """
    formatted = _format_magnitude(abs(minutes))
    return f"({formatted})" if minutes < 0 else formatted


@dataclass(frozen=True, order=True)
class Duration:
    """Signed amount of TOIL time held as whole minutes."""

    minutes: int = 0

    @classmethod
    def parse(cls, text: str | None) -> Self:
        """Build from free-form user input, leniently."""
        return cls(to_minutes(parse_duration(text)))

    @classmethod
    def from_canonical(cls, text: str | None) -> Self:
        """Build from a stored ``HH:MM`` / ``(HH:MM)`` string."""
        return cls(to_minutes(text))

    @property
    def is_negative(self) -> bool:
        return self.minutes < 0

    def __str__(self) -> str:
        return to_canonical(self.minutes)

    def __add__(self, other: Duration) -> Duration:
        return Duration(self.minutes + other.minutes)

    def __sub__(self, other: Duration) -> Duration:
        return Duration(self.minutes - other.minutes)

    def __neg__(self) -> Duration:
        return Duration(-self.minutes)
