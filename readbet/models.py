"""
Domain models for the ReadBet commitment engine.

Plain dataclasses with no storage behaviour: the persistence collaborator
maps them through ``readbet.schemas``.  Commitments are frozen; the ledger
replaces them (``dataclasses.replace``) when a wager or day clock changes.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple, Union

from readbet.core import odds_math
from readbet.core.schedule import (
    Advanced,
    DayClock,
    DayRange,
    Scheduled,
    ScheduleStatus,
    advance,
    calendar_day,
    can_advance_day,
    classify_progress,
    current_day,
    daily_target,
    day_range,
    iter_day_ranges,
    resolve_timeframe_days,
    target_end_date,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Books and reading preferences
# ---------------------------------------------------------------------------

class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def multiplier(self) -> float:
        return _DIFFICULTY_MULTIPLIERS[self]


_DIFFICULTY_MULTIPLIERS = {
    Difficulty.EASY: 0.8,
    Difficulty.MEDIUM: 1.0,
    Difficulty.HARD: 1.4,
}


class GoalUnit(str, Enum):
    PAGES = "pages"
    CHAPTERS = "chapters"


class CountingStyle(str, Enum):
    INCLUSIVE = "inclusive"     # every page, front and back matter included
    MAIN_ONLY = "main_only"     # trim estimated front/back matter
    CUSTOM = "custom"           # explicit start/end


@dataclass(frozen=True)
class ReadingPreferences:
    """How much of a book counts toward a goal."""

    counting_style: CountingStyle = CountingStyle.INCLUSIVE
    goal_unit: GoalUnit = GoalUnit.PAGES

    front_matter_pages: int = 10
    back_matter_pages: int = 20
    custom_start_page: Optional[int] = None
    custom_end_page: Optional[int] = None

    front_matter_chapters: int = 1
    back_matter_chapters: int = 1
    custom_start_chapter: Optional[int] = None
    custom_end_chapter: Optional[int] = None

    @classmethod
    def defaults_for(
        cls, total_pages: int, total_chapters: Optional[int] = None
    ) -> "ReadingPreferences":
        """Front/back matter estimates scaled to the book's length."""
        if total_pages > 300:
            front, back = 15, 25
        elif total_pages > 150:
            front, back = 10, 15
        else:
            front, back = 5, 10

        front_ch, back_ch = 1, 1
        if total_chapters:
            if total_chapters > 40:
                front_ch, back_ch = 2, 2
            elif total_chapters > 20:
                front_ch, back_ch = 1, 1
            else:
                front_ch, back_ch = 1, 0

        return cls(
            front_matter_pages=front,
            back_matter_pages=back,
            front_matter_chapters=front_ch,
            back_matter_chapters=back_ch,
        )


@dataclass(frozen=True)
class ReadingRange:
    """Inclusive unit range counted toward a goal."""

    start: int
    end: int

    @property
    def size(self) -> int:
        return max(0, self.end - self.start + 1)


@dataclass(frozen=True)
class Book:
    """Catalog metadata as supplied by the search collaborator."""

    id: str
    title: str
    total_pages: int
    author: Optional[str] = None
    total_chapters: Optional[int] = None
    difficulty: Difficulty = Difficulty.MEDIUM
    preferences: Optional[ReadingPreferences] = None

    @property
    def reading_preferences(self) -> ReadingPreferences:
        if self.preferences is not None:
            return self.preferences
        return ReadingPreferences.defaults_for(self.total_pages, self.total_chapters)

    @property
    def goal_unit(self) -> GoalUnit:
        return self.reading_preferences.goal_unit

    @property
    def has_custom_preferences(self) -> bool:
        prefs = self.reading_preferences
        return (
            prefs.counting_style is not CountingStyle.INCLUSIVE
            or prefs.custom_start_page is not None
            or prefs.custom_end_page is not None
        )

    def effective_range(self, unit: Optional[GoalUnit] = None) -> ReadingRange:
        """Range that counts toward a goal in ``unit`` (default: preferred unit).

        An explicit custom start or end always wins; otherwise the counting
        style decides.  The result never leaves ``[1, total]``.
        """
        unit = unit or self.goal_unit
        prefs = self.reading_preferences
        if unit is GoalUnit.CHAPTERS:
            total = self.total_chapters or 0
            front, back = prefs.front_matter_chapters, prefs.back_matter_chapters
            custom_start, custom_end = prefs.custom_start_chapter, prefs.custom_end_chapter
        else:
            total = self.total_pages
            front, back = prefs.front_matter_pages, prefs.back_matter_pages
            custom_start, custom_end = prefs.custom_start_page, prefs.custom_end_page

        if prefs.counting_style is CountingStyle.MAIN_ONLY:
            start, end = front + 1, total - back
        else:
            start, end = 1, total

        if custom_start is not None:
            start = custom_start
        if custom_end is not None:
            end = custom_end

        return ReadingRange(start=max(start, 1), end=min(end, total))

    def effective_units(self, unit: Optional[GoalUnit] = None) -> int:
        return self.effective_range(unit).size


# ---------------------------------------------------------------------------
# Reading commitments
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReadingCommitment:
    """A staked goal to read a book's effective range within a timeframe."""

    id: uuid.UUID
    book: Book
    timeframe: str
    total_days: int
    odds: str
    wager: float
    daily_target: int
    unit: GoalUnit
    clock: DayClock

    @classmethod
    def create(
        cls,
        book: Book,
        timeframe: str,
        odds: str,
        wager: float,
        *,
        unit: Optional[GoalUnit] = None,
        now: Optional[datetime] = None,
    ) -> "ReadingCommitment":
        """Draft a commitment; ``daily_target = ceil(units / total_days)``.

        Raises:
            ValueError: If the timeframe, odds or wager are invalid, or the
                book has nothing to read in ``unit``.
        """
        unit = unit or book.goal_unit
        if unit is GoalUnit.CHAPTERS and not book.total_chapters:
            raise ValueError(f"Book {book.id!r} has no chapter count; cannot set a chapter goal.")
        _check_wager(wager)
        odds_math.parse_american(odds)

        total_days = resolve_timeframe_days(timeframe)
        units = book.effective_units(unit)
        if units <= 0:
            raise ValueError(f"Book {book.id!r} has no readable {unit.value} in its effective range.")

        return cls(
            id=uuid.uuid4(),
            book=book,
            timeframe=timeframe,
            total_days=total_days,
            odds=odds,
            wager=float(wager),
            daily_target=daily_target(units, total_days),
            unit=unit,
            clock=Scheduled(start=now or utcnow()),
        )

    # --- range -------------------------------------------------------

    @property
    def effective_range(self) -> ReadingRange:
        return self.book.effective_range(self.unit)

    @property
    def effective_start(self) -> int:
        return self.effective_range.start

    @property
    def effective_end(self) -> int:
        return self.effective_range.end

    @property
    def effective_units(self) -> int:
        return self.effective_range.size

    # --- dates -------------------------------------------------------

    @property
    def start_date(self) -> datetime:
        return self.clock.start

    @property
    def target_end_date(self) -> datetime:
        return target_end_date(self.start_date, self.total_days)

    @property
    def is_advanced(self) -> bool:
        return isinstance(self.clock, Advanced)

    def current_day(self, now: Optional[datetime] = None) -> int:
        return current_day(self.clock, self.total_days, now or utcnow())

    def calendar_day(self, now: Optional[datetime] = None) -> int:
        return calendar_day(self.clock, now or utcnow())

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        return self.calendar_day(now) > self.total_days

    # --- schedule ----------------------------------------------------

    def day_range(self, day: int) -> DayRange:
        return day_range(
            self.effective_start, self.effective_end, self.daily_target, self.total_days, day
        )

    def day_ranges(self) -> Tuple[DayRange, ...]:
        return tuple(
            iter_day_ranges(self.effective_start, self.effective_end, self.daily_target, self.total_days)
        )

    def expected_units_by_day(self, day: int) -> int:
        return min(day * self.daily_target, self.effective_units)

    def status(self, position: int, now: Optional[datetime] = None) -> ScheduleStatus:
        now = now or utcnow()
        return classify_progress(
            position,
            effective_start=self.effective_start,
            effective_end=self.effective_end,
            target_per_day=self.daily_target,
            day=self.current_day(now),
            calendar_day_index=self.calendar_day(now),
            total_days=self.total_days,
        )

    def can_advance(self, position: int, now: Optional[datetime] = None) -> bool:
        day = self.current_day(now)
        return can_advance_day(position, self.day_range(day), day, self.total_days)

    # --- payout ------------------------------------------------------

    @property
    def potential_win(self) -> float:
        return odds_math.potential_win(self.odds, self.wager)

    @property
    def total_payout(self) -> float:
        return self.wager + self.potential_win

    # --- transitions -------------------------------------------------

    def with_wager(self, wager: float) -> "ReadingCommitment":
        _check_wager(wager)
        return replace(self, wager=float(wager))

    def restarted(self, now: datetime) -> "ReadingCommitment":
        """Same goal with day 1 starting at ``now``."""
        return replace(self, clock=Scheduled(start=now))

    def advanced(self, now: Optional[datetime] = None) -> "ReadingCommitment":
        return replace(self, clock=advance(self.clock, self.total_days, now or utcnow()))


# ---------------------------------------------------------------------------
# Engagement commitments
# ---------------------------------------------------------------------------

class EngagementType(str, Enum):
    QUOTES = "quotes"
    THOUGHTS = "thoughts"
    APPLICATIONS = "applications"
    QUESTIONS = "questions"


@dataclass(frozen=True)
class EngagementGoal:
    kind: EngagementType
    target_count: int
    current_count: int = 0
    entries: Tuple[str, ...] = ()
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def is_complete(self) -> bool:
        return self.current_count >= self.target_count

    @property
    def progress_ratio(self) -> float:
        if self.target_count <= 0:
            return 0.0
        return min(self.current_count / self.target_count, 1.0)


@dataclass(frozen=True)
class EngagementCommitment:
    """A staked goal to log journal entries of each kind for a book."""

    id: uuid.UUID
    book: Book
    goals: Tuple[EngagementGoal, ...]
    odds: str
    wager: float
    created_at: datetime

    @classmethod
    def create(
        cls,
        book: Book,
        goals,
        odds: str,
        wager: float,
        *,
        now: Optional[datetime] = None,
    ) -> "EngagementCommitment":
        goals = tuple(goals)
        if not goals:
            raise ValueError("An engagement commitment needs at least one goal.")
        kinds = [g.kind for g in goals]
        if len(set(kinds)) != len(kinds):
            raise ValueError("Engagement goals must have distinct kinds.")
        for goal in goals:
            if goal.target_count < 1:
                raise ValueError(
                    f"Engagement goal {goal.kind.value!r} needs a target of at least 1, got {goal.target_count!r}."
                )
        _check_wager(wager)
        odds_math.parse_american(odds)
        return cls(
            id=uuid.uuid4(),
            book=book,
            goals=goals,
            odds=odds,
            wager=float(wager),
            created_at=now or utcnow(),
        )

    @property
    def total_target_count(self) -> int:
        return sum(g.target_count for g in self.goals)

    @property
    def total_current_count(self) -> int:
        return sum(g.current_count for g in self.goals)

    @property
    def completed_goal_count(self) -> int:
        return sum(1 for g in self.goals if g.is_complete)

    @property
    def is_complete(self) -> bool:
        return all(g.is_complete for g in self.goals)

    @property
    def progress_percentage(self) -> float:
        """Mean per-goal completion ratio, in ``[0, 1]``."""
        if not self.goals:
            return 0.0
        return sum(g.progress_ratio for g in self.goals) / len(self.goals)

    @property
    def potential_win(self) -> float:
        return odds_math.potential_win(self.odds, self.wager)

    @property
    def total_payout(self) -> float:
        return self.wager + self.potential_win

    def with_wager(self, wager: float) -> "EngagementCommitment":
        _check_wager(wager)
        return replace(self, wager=float(wager))

    def with_progress(
        self, kind: EngagementType, increment: int = 1, entry: Optional[str] = None
    ) -> "EngagementCommitment":
        """Return a copy with ``increment`` added to the goal of ``kind``.

        Raises:
            ValueError: If no goal of that kind exists.
        """
        updated = []
        found = False
        for goal in self.goals:
            if goal.kind is kind:
                found = True
                entries = goal.entries + ((entry,) if entry else ())
                goal = replace(goal, current_count=goal.current_count + increment, entries=entries)
            updated.append(goal)
        if not found:
            raise ValueError(f"No {kind.value!r} goal on engagement commitment {self.id}.")
        return replace(self, goals=tuple(updated))


Commitment = Union[ReadingCommitment, EngagementCommitment]


# ---------------------------------------------------------------------------
# Progress and settlement
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProgressRecord:
    """Snapshot of a reading commitment's progress after a session."""

    commitment_id: uuid.UUID
    cumulative_units: int
    last_position: int
    day_units: int = 0
    sessions: int = 0
    updated_at: Optional[datetime] = None


class SettlementOutcome(str, Enum):
    WON = "won"
    LOST = "lost"


@dataclass(frozen=True)
class SettledCommitment:
    commitment: Commitment
    settled_at: datetime
    units_consumed: int
    outcome: SettlementOutcome
    payout: float
    reason: Optional[str] = None

    @property
    def was_successful(self) -> bool:
        return self.outcome is SettlementOutcome.WON

    @property
    def commitment_id(self) -> uuid.UUID:
        return self.commitment.id


class ParlayStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"


@dataclass(frozen=True)
class ParlayTicket:
    """Combined quote over commitments confirmed together."""

    id: uuid.UUID
    leg_ids: Tuple[uuid.UUID, ...]
    combined_odds: str
    wager: float
    placed_at: datetime

    @property
    def potential_win(self) -> float:
        return odds_math.potential_win(self.combined_odds, self.wager)

    @property
    def total_payout(self) -> float:
        return self.wager + self.potential_win


def _check_wager(wager: float) -> None:
    if wager is None or wager <= 0:
        raise ValueError(f"Wager must be positive, got {wager!r}.")
