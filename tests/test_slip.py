"""Tests for services/slip.py"""

from datetime import datetime, timezone

import pytest

from readbet.errors import CommitmentStateError
from readbet.models import (
    Book,
    EngagementCommitment,
    EngagementGoal,
    EngagementType,
    ReadingCommitment,
)
from readbet.services.slip import CommitmentSlip

START = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _reading(book_id="b1", odds="+100", wager=10.0, timeframe="10 Day"):
    book = Book(id=book_id, title=book_id.upper(), total_pages=300)
    return ReadingCommitment.create(book, timeframe, odds, wager, now=START)


def _engagement(book_id="b1", odds="+100", wager=10.0):
    book = Book(id=book_id, title=book_id.upper(), total_pages=300)
    goals = [EngagementGoal(EngagementType.QUOTES, 3)]
    return EngagementCommitment.create(book, goals, odds, wager, now=START)


class TestDrafts:

    def test_empty(self):
        slip = CommitmentSlip()
        assert slip.is_empty
        assert not slip.is_parlay
        assert slip.combined_odds() is None
        assert slip.total_wager == 0
        assert slip.parlay_potential_win() == 0.0

    def test_same_book_replaces_draft(self):
        slip = CommitmentSlip()
        slip.add_reading(_reading(timeframe="10 Day"))
        second = slip.add_reading(_reading(timeframe="2 Weeks"))
        assert slip.total_count == 1
        assert slip.reading_drafts == (second,)

    def test_categories_are_independent(self):
        slip = CommitmentSlip()
        slip.add_reading(_reading("b1"))
        slip.add_engagement(_engagement("b1"))
        assert slip.total_count == 2
        assert slip.is_parlay
        assert slip.contains_book("b1")
        assert not slip.contains_book("b2")

    def test_remove(self):
        slip = CommitmentSlip()
        draft = slip.add_reading(_reading())
        assert slip.remove(draft.id) is draft
        assert slip.is_empty

    def test_remove_unknown_raises(self):
        slip = CommitmentSlip()
        slip.add_reading(_reading())
        with pytest.raises(CommitmentStateError):
            slip.remove(_reading("b2").id)
        assert slip.total_count == 1

    def test_update_wager(self):
        slip = CommitmentSlip()
        draft = slip.add_engagement(_engagement())
        updated = slip.update_wager(draft.id, 25.0)
        assert updated.wager == 25.0
        assert slip.get(draft.id).wager == 25.0

    def test_update_wager_rejects_non_positive(self):
        slip = CommitmentSlip()
        draft = slip.add_reading(_reading())
        with pytest.raises(ValueError):
            slip.update_wager(draft.id, 0)
        assert slip.get(draft.id).wager == 10.0

    def test_clear_empties_both_categories(self):
        slip = CommitmentSlip()
        slip.add_reading(_reading("b1"))
        slip.add_engagement(_engagement("b2"))
        slip.clear()
        assert slip.is_empty
        assert slip.reading_drafts == () and slip.engagement_drafts == ()


class TestAggregates:

    def test_parlay_of_two_even_money_legs(self):
        slip = CommitmentSlip()
        slip.add_reading(_reading("b1"))
        slip.add_reading(_reading("b2"))
        assert slip.combined_odds() == "+300"
        assert slip.total_wager == pytest.approx(20.0)
        assert slip.total_potential_win == pytest.approx(20.0)
        assert slip.total_payout == pytest.approx(40.0)
        assert slip.parlay_potential_win() == pytest.approx(60.0)

    def test_single_leg_keeps_its_odds(self):
        slip = CommitmentSlip()
        slip.add_reading(_reading(odds="+175"))
        assert slip.combined_odds() == "+175"

    def test_removing_a_leg_lowers_combined_odds(self):
        slip = CommitmentSlip()
        slip.add_reading(_reading("b1", odds="+150"))
        third = slip.add_reading(_reading("b2", odds="+120"))
        slip.add_engagement(_engagement("b3", odds="+115"))
        before = int(slip.combined_odds())
        slip.remove(third.id)
        assert int(slip.combined_odds()) <= before
