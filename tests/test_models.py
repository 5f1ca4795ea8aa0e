"""Tests for models.py: effective ranges, commitments and engagement goals."""

from datetime import datetime, timedelta, timezone

import pytest

from readbet.core.schedule import ScheduleStatus
from readbet.models import (
    Book,
    CountingStyle,
    Difficulty,
    EngagementCommitment,
    EngagementGoal,
    EngagementType,
    GoalUnit,
    ParlayTicket,
    ReadingCommitment,
    ReadingPreferences,
    SettledCommitment,
    SettlementOutcome,
)

START = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _book(pages=300, **kwargs):
    return Book(id=kwargs.pop("id", "b-300"), title=kwargs.pop("title", "Dune"), total_pages=pages, **kwargs)


def _commitment(book=None, timeframe="10 Day", odds="+200", wager=10.0, **kwargs):
    return ReadingCommitment.create(book or _book(), timeframe, odds, wager, now=START, **kwargs)


# ---------------------------------------------------------------------------
# Books and preferences
# ---------------------------------------------------------------------------

def test_difficulty_multipliers():
    assert Difficulty.EASY.multiplier == 0.8
    assert Difficulty.MEDIUM.multiplier == 1.0
    assert Difficulty.HARD.multiplier == 1.4


@pytest.mark.parametrize("pages,front,back", [(400, 15, 25), (301, 15, 25), (200, 10, 15), (150, 5, 10), (80, 5, 10)])
def test_default_matter_by_length(pages, front, back):
    prefs = ReadingPreferences.defaults_for(pages)
    assert (prefs.front_matter_pages, prefs.back_matter_pages) == (front, back)


@pytest.mark.parametrize("chapters,front,back", [(50, 2, 2), (30, 1, 1), (10, 1, 0), (None, 1, 1)])
def test_default_chapter_matter(chapters, front, back):
    prefs = ReadingPreferences.defaults_for(300, chapters)
    assert (prefs.front_matter_chapters, prefs.back_matter_chapters) == (front, back)


class TestEffectiveRange:

    def test_inclusive_by_default(self):
        book = _book()
        assert (book.effective_range().start, book.effective_range().end) == (1, 300)
        assert book.effective_units() == 300
        assert not book.has_custom_preferences

    def test_main_only_trims_matter(self):
        prefs = ReadingPreferences(counting_style=CountingStyle.MAIN_ONLY, front_matter_pages=10, back_matter_pages=20)
        book = _book(preferences=prefs)
        rng = book.effective_range()
        assert (rng.start, rng.end, rng.size) == (11, 280, 270)
        assert book.has_custom_preferences

    def test_custom_start_and_end(self):
        prefs = ReadingPreferences(counting_style=CountingStyle.CUSTOM, custom_start_page=5, custom_end_page=250)
        rng = _book(preferences=prefs).effective_range()
        assert (rng.start, rng.end) == (5, 250)

    def test_custom_end_clamped_to_book(self):
        prefs = ReadingPreferences(counting_style=CountingStyle.CUSTOM, custom_end_page=400)
        assert _book(preferences=prefs).effective_range().end == 300

    def test_custom_start_overrides_main_only(self):
        prefs = ReadingPreferences(counting_style=CountingStyle.MAIN_ONLY, custom_start_page=3)
        rng = _book(preferences=prefs).effective_range()
        assert (rng.start, rng.end) == (3, 280)

    def test_chapter_range(self):
        prefs = ReadingPreferences(
            counting_style=CountingStyle.MAIN_ONLY,
            goal_unit=GoalUnit.CHAPTERS,
            front_matter_chapters=1,
            back_matter_chapters=1,
        )
        book = _book(total_chapters=20, preferences=prefs)
        assert book.goal_unit is GoalUnit.CHAPTERS
        assert (book.effective_range().start, book.effective_range().end) == (2, 19)
        assert book.effective_units(GoalUnit.PAGES) == 270

    def test_book_without_chapters_has_empty_chapter_range(self):
        assert _book().effective_units(GoalUnit.CHAPTERS) == 0


# ---------------------------------------------------------------------------
# Reading commitments
# ---------------------------------------------------------------------------

class TestReadingCommitment:

    def test_create_resolves_schedule(self):
        c = _commitment()
        assert c.total_days == 10
        assert c.daily_target == 30
        assert (c.effective_start, c.effective_end, c.effective_units) == (1, 300, 300)
        assert c.start_date == START
        assert c.target_end_date == START + timedelta(days=9)
        assert not c.is_advanced

    def test_schedule_invariant(self):
        c = _commitment(_book(301))
        assert c.daily_target * c.total_days >= c.effective_units
        assert c.day_ranges()[-1].end_unit == 301

    def test_payout(self):
        c = _commitment()
        assert c.potential_win == pytest.approx(20.0)
        assert c.total_payout == pytest.approx(30.0)

    def test_days(self):
        c = _commitment()
        assert c.current_day(START + timedelta(days=4)) == 5
        assert not c.is_overdue(START + timedelta(days=9))
        assert c.is_overdue(START + timedelta(days=10))
        assert c.current_day(START + timedelta(days=10)) == 10

    def test_expected_units(self):
        c = _commitment()
        assert c.expected_units_by_day(5) == 150
        assert c.expected_units_by_day(10) == 300

    def test_status(self):
        c = _commitment()
        day5 = START + timedelta(days=4)
        assert c.status(150, day5) is ScheduleStatus.ON_TRACK
        assert c.status(200, day5) is ScheduleStatus.AHEAD

    def test_advanced_clock(self):
        c = _commitment().advanced(START)
        assert c.is_advanced
        assert c.current_day(START) == 2
        assert c.start_date == START

    def test_cannot_advance_past_last_day(self):
        c = _commitment(timeframe="1 Day")
        with pytest.raises(ValueError):
            c.advanced(START)

    def test_restarted(self):
        later = START + timedelta(days=3)
        assert _commitment().restarted(later).start_date == later

    def test_with_wager(self):
        c = _commitment()
        assert c.with_wager(25).wager == 25.0
        assert c.wager == 10.0
        with pytest.raises(ValueError):
            c.with_wager(0)

    @pytest.mark.parametrize("kwargs", [
        {"wager": 0},
        {"wager": -5},
        {"odds": "even"},
        {"odds": "+50"},
        {"timeframe": "0 Days"},
        {"timeframe": ""},
    ])
    def test_create_rejects_bad_input(self, kwargs):
        with pytest.raises(ValueError):
            _commitment(**kwargs)

    def test_chapter_goal_requires_chapters(self):
        with pytest.raises(ValueError):
            _commitment(unit=GoalUnit.CHAPTERS)

    def test_chapter_goal(self):
        c = _commitment(_book(total_chapters=20), unit=GoalUnit.CHAPTERS)
        assert c.effective_units == 20
        assert c.daily_target == 2


# ---------------------------------------------------------------------------
# Engagement commitments
# ---------------------------------------------------------------------------

class TestEngagementCommitment:

    def _create(self):
        goals = [
            EngagementGoal(kind=EngagementType.QUOTES, target_count=3),
            EngagementGoal(kind=EngagementType.THOUGHTS, target_count=2),
        ]
        return EngagementCommitment.create(_book(), goals, "+130", 10.0, now=START)

    def test_totals(self):
        c = self._create()
        assert c.total_target_count == 5
        assert c.total_current_count == 0
        assert not c.is_complete

    def test_with_progress(self):
        c = self._create().with_progress(EngagementType.QUOTES, 2, "fear is the mind-killer")
        quotes = c.goals[0]
        assert quotes.current_count == 2
        assert quotes.entries == ("fear is the mind-killer",)
        assert c.progress_percentage == pytest.approx((2 / 3) / 2)

    def test_complete(self):
        c = self._create()
        c = c.with_progress(EngagementType.QUOTES, 3).with_progress(EngagementType.THOUGHTS, 2)
        assert c.is_complete
        assert c.completed_goal_count == 2
        assert c.progress_percentage == pytest.approx(1.0)

    def test_missing_kind_raises(self):
        with pytest.raises(ValueError):
            self._create().with_progress(EngagementType.QUESTIONS)

    def test_requires_goals(self):
        with pytest.raises(ValueError):
            EngagementCommitment.create(_book(), [], "+130", 10.0)

    def test_duplicate_kinds_rejected(self):
        goals = [EngagementGoal(EngagementType.QUOTES, 1), EngagementGoal(EngagementType.QUOTES, 2)]
        with pytest.raises(ValueError):
            EngagementCommitment.create(_book(), goals, "+130", 10.0)

    @pytest.mark.parametrize("target", [0, -2])
    def test_goal_target_must_be_positive(self, target):
        goals = [EngagementGoal(EngagementType.QUOTES, 2), EngagementGoal(EngagementType.THOUGHTS, target)]
        with pytest.raises(ValueError):
            EngagementCommitment.create(_book(), goals, "+130", 10.0)


# ---------------------------------------------------------------------------
# Settlement and parlays
# ---------------------------------------------------------------------------

def test_settled_commitment():
    c = _commitment()
    won = SettledCommitment(c, START, 300, SettlementOutcome.WON, 30.0)
    lost = SettledCommitment(c, START, 120, SettlementOutcome.LOST, 0.0, reason="abandoned")
    assert won.was_successful
    assert not lost.was_successful
    assert won.commitment_id == c.id


def test_parlay_ticket_payout():
    ticket = ParlayTicket(id=_commitment().id, leg_ids=(), combined_odds="+300", wager=20.0, placed_at=START)
    assert ticket.potential_win == pytest.approx(60.0)
    assert ticket.total_payout == pytest.approx(80.0)
