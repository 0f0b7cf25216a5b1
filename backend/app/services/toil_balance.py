"""Daily running-balance calculator for a TOIL week.

Pure functions only: every call rebuilds the result from the carry-in and the
entries it is given, so repeated calls with the same input give equal output.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING, Protocol

from app.models.enums import EntryStatus
from app.services.time_codec import ZERO, to_canonical, to_minutes

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable, Sequence

DAYS_PER_WEEK = 7


class HoursEntry(Protocol):
    """Anything carrying one day's requested and used hours."""

    @property
    def date(self) -> date: ...

    @property
    def requested_hours(self) -> str | None: ...

    @property
    def used_hours(self) -> str | None: ...


@dataclass(frozen=True)
class DailyBalance:
    """Derived balance for one day of a week."""

    date: date
    net_minutes: int
    running_balance_minutes: int

    @property
    def net_hours(self) -> str:
        return to_canonical(self.net_minutes)

    @property
    def running_balance(self) -> str:
        return to_canonical(self.running_balance_minutes)

    @property
    def is_negative(self) -> bool:
        return self.running_balance_minutes < 0


@dataclass(frozen=True)
class WeekDay:
    """A day of the week as shown to the user, stored or placeholder."""

    date: date
    requested_hours: str = ZERO
    used_hours: str = ZERO
    status: str = EntryStatus.DRAFT
    entry_id: uuid.UUID | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.entry_id is None


def net_minutes(entry: HoursEntry) -> int:
    """Requested minus used minutes for one day; missing hours count as zero."""
    return to_minutes(entry.requested_hours or ZERO) - to_minutes(entry.used_hours or ZERO)


def recompute_week(carry_in_minutes: int, entries: Iterable[HoursEntry]) -> list[DailyBalance]:
    """Turn a carry-in balance and a set of day entries into running balances.

    Entries are sorted by date here; callers may pass them in any order.
    Each day's result depends only on the carry-in and the days before it.
    """
    running = carry_in_minutes
    balances: list[DailyBalance] = []
    for entry in sorted(entries, key=lambda e: e.date):
        net = net_minutes(entry)
        running += net
        balances.append(DailyBalance(date=entry.date, net_minutes=net, running_balance_minutes=running))
    return balances


def week_start_for(day: date) -> date:
    """Return the Monday on or before ``day``."""
    return day - timedelta(days=day.weekday())


def week_dates(week_start: date) -> list[date]:
    """Return Monday through Sunday of the week starting at ``week_start``."""
    monday = week_start_for(week_start)
    return [monday + timedelta(days=offset) for offset in range(DAYS_PER_WEEK)]


def fill_week(week_start: date, entries: Sequence[HoursEntry]) -> list[WeekDay]:
    """Return all seven days of the week, adding zero placeholders for missing ones.

    Entries dated outside the week are ignored.
    """
    by_date = {entry.date: entry for entry in entries}
    days: list[WeekDay] = []
    for day in week_dates(week_start):
        entry = by_date.get(day)
        if entry is None:
            days.append(WeekDay(date=day))
            continue
        days.append(
            WeekDay(
                date=day,
                requested_hours=entry.requested_hours or ZERO,
                used_hours=entry.used_hours or ZERO,
                status=getattr(entry, "status", EntryStatus.DRAFT),
                entry_id=getattr(entry, "id", None),
            )
        )
    return days
