"""Day scheduling math for reading commitments.

All functions here are **pure**: the wall clock is always passed in.

A commitment over ``total_days`` days on the effective range
``[effective_start, effective_end]`` owes a uniform ``daily_target`` of
units per day, rounded up, so the last day may owe fewer units than the
others.  Day ``d`` covers::

    start  = effective_start + (d − 1) × daily_target
    end    = min(start + daily_target − 1, effective_end)

Because ``daily_target × total_days ≥ units`` the day ranges tile the
effective range exactly with no gaps or overlaps.  When the rounded-up
target finishes the range early (10 pages over 6 days) the trailing days
are empty: ``end_unit < start_unit`` and ``target == 0``.

The current day is held by a two-state :data:`DayClock`:

* :class:`Scheduled` — derived from the wall clock,
  ``clamp(days_elapsed + 1, 1, total_days)``.
* :class:`Advanced` — an explicit day index set when the reader gets ahead.
  It stays in force until advanced again.

Run tests with::

    pytest tests/test_schedule.py -v
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Final, Iterator, Union

_TIMEFRAME_PATTERN: Final[re.Pattern] = re.compile(r"^\s*(\d+)\s*([A-Za-z]*)\s*$")

#: Unit token prefix → days per unit.
_UNIT_DAYS: Final[dict] = {
    "day": 1,
    "week": 7,
    "month": 30,
}


class ScheduleStatus(str, Enum):
    """Where a reading commitment stands against its schedule."""

    ON_TRACK = "on_track"
    AHEAD = "ahead"
    BEHIND = "behind"
    OVERDUE = "overdue"
    COMPLETED = "completed"


# ---------------------------------------------------------------------------
# Timeframe and daily target
# ---------------------------------------------------------------------------


def resolve_timeframe_days(label: str) -> int:
    """Resolve a timeframe label to a day count.

    Examples::

        resolve_timeframe_days("1 Day")    → 1
        resolve_timeframe_days("2 Weeks")  → 14
        resolve_timeframe_days("1 Month")  → 30
        resolve_timeframe_days("10 sprints") → 10   (unknown unit → days)

    Raises:
        ValueError: If the label has no leading integer or resolves to
            zero days.
    """
    match = _TIMEFRAME_PATTERN.match(label or "")
    if match is None:
        raise ValueError(f"Timeframe {label!r} must be a whole count with an optional day/week/month unit.")

    count = int(match.group(1))
    token = match.group(2).lower()
    per_unit = next(
        (days for prefix, days in _UNIT_DAYS.items() if token.startswith(prefix)),
        1,
    )
    total = count * per_unit
    if total <= 0:
        raise ValueError(f"Timeframe {label!r} resolves to {total} days; must be positive.")
    return total


def daily_target(effective_units: int, total_days: int) -> int:
    """Minimal uniform units per day that reaches the goal on the last day."""
    if total_days <= 0:
        raise ValueError(f"total_days must be positive, got {total_days!r}.")
    if effective_units <= 0:
        raise ValueError(f"effective_units must be positive, got {effective_units!r}.")
    return math.ceil(effective_units / total_days)


# ---------------------------------------------------------------------------
# Day ranges
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DayRange:
    """Inclusive unit range owed on one day."""

    day: int
    start_unit: int
    end_unit: int

    @property
    def target(self) -> int:
        return max(0, self.end_unit - self.start_unit + 1)

    def as_tuple(self) -> tuple[int, int, int]:
        return self.start_unit, self.end_unit, self.target


def day_range(
    effective_start: int,
    effective_end: int,
    target_per_day: int,
    total_days: int,
    day: int,
) -> DayRange:
    """Unit range owed on ``day`` (1-based).

    Raises:
        ValueError: If ``day`` is outside ``[1, total_days]``.
    """
    if not 1 <= day <= total_days:
        raise ValueError(f"day must be in [1, {total_days}], got {day!r}.")
    start = effective_start + (day - 1) * target_per_day
    end = min(start + target_per_day - 1, effective_end)
    return DayRange(day=day, start_unit=start, end_unit=end)


def iter_day_ranges(
    effective_start: int,
    effective_end: int,
    target_per_day: int,
    total_days: int,
) -> Iterator[DayRange]:
    for day in range(1, total_days + 1):
        yield day_range(effective_start, effective_end, target_per_day, total_days, day)


def day_progress(position: int, owed: DayRange) -> int:
    """Units of ``owed`` covered by a reader whose last page is ``position``."""
    return max(0, min(position - owed.start_unit + 1, owed.target))


# ---------------------------------------------------------------------------
# Day clock
# ---------------------------------------------------------------------------


def days_elapsed(start: datetime, now: datetime) -> int:
    """Whole calendar days between ``start`` and ``now`` (may be negative)."""
    return (_as_date(now) - _as_date(start)).days


def _as_date(moment: datetime | date) -> date:
    return moment.date() if isinstance(moment, datetime) else moment


@dataclass(frozen=True)
class Scheduled:
    """Current day follows the calendar from ``start``."""

    start: datetime

    def day_index(self, now: datetime) -> int:
        return days_elapsed(self.start, now) + 1


@dataclass(frozen=True)
class Advanced:
    """Current day pinned to ``day`` after the reader got ahead."""

    start: datetime
    day: int

    def day_index(self, now: datetime) -> int:
        return self.day


DayClock = Union[Scheduled, Advanced]


def current_day(clock: DayClock, total_days: int, now: datetime) -> int:
    """Current day index in ``[1, total_days]``."""
    return min(max(clock.day_index(now), 1), total_days)


def calendar_day(clock: DayClock, now: datetime) -> int:
    """Unclamped calendar day index; exceeds ``total_days`` once overdue."""
    return days_elapsed(clock.start, now) + 1


def target_end_date(start: datetime, total_days: int) -> datetime:
    """Timestamp on the last scheduled day."""
    return start + timedelta(days=total_days - 1)


def advance(clock: DayClock, total_days: int, now: datetime) -> Advanced:
    """Pin the clock one day past the current day.

    Raises:
        ValueError: If the current day is already the last day.
    """
    today = current_day(clock, total_days, now)
    if today >= total_days:
        raise ValueError(f"Already on the final day ({total_days}); cannot advance.")
    return Advanced(start=clock.start, day=today + 1)


# ---------------------------------------------------------------------------
# Status classification
# ---------------------------------------------------------------------------


def classify_progress(
    position: int,
    *,
    effective_start: int,
    effective_end: int,
    target_per_day: int,
    day: int,
    calendar_day_index: int,
    total_days: int,
) -> ScheduleStatus:
    """Classify a reader's position against the schedule.

    1. ``position ≥ effective_end`` → completed.
    2. Calendar day past ``total_days`` → overdue.
    3. Otherwise compare units read with ``day × target_per_day``: a full
       day or more ahead → ahead; more than a full day short → behind;
       anything between → on track.

    ``position`` is the last page (or chapter) reached.  Units read are
    measured from ``effective_start`` so trimmed front matter does not
    count toward the schedule.
    """
    if position >= effective_end:
        return ScheduleStatus.COMPLETED
    if calendar_day_index > total_days:
        return ScheduleStatus.OVERDUE

    units_read = max(0, position - effective_start + 1)
    expected = day * target_per_day
    if units_read >= expected + target_per_day:
        return ScheduleStatus.AHEAD
    if units_read < expected - target_per_day:
        return ScheduleStatus.BEHIND
    return ScheduleStatus.ON_TRACK


def can_advance_day(position: int, owed_today: DayRange, day: int, total_days: int) -> bool:
    """True when today's range is finished and a later day exists."""
    return position >= owed_today.end_unit and day < total_days
