"""
Tests for core/odds_math.py

Run with: pytest tests/test_odds_math.py -v
"""

import pytest

from readbet.core.odds_math import (
    american_to_decimal,
    combine_parlay_odds,
    decimal_to_american,
    format_american,
    parse_american,
    potential_win,
    total_payout,
)


class TestParseAmerican:
    """Parsing quote strings."""

    @pytest.mark.parametrize("raw,expected", [
        ("+180", 180),
        ("250", 250),
        ("-110", -110),
        ("  + 150 ", 150),
        (200, 200),
    ])
    def test_valid(self, raw, expected):
        assert parse_american(raw) == expected

    @pytest.mark.parametrize("raw", ["", "abc", "+50", "-99", "1.5", "++100", None])
    def test_invalid_raises(self, raw):
        with pytest.raises(ValueError):
            parse_american(raw)

    def test_format_adds_sign(self):
        assert format_american(180) == "+180"
        assert format_american(-110) == "-110"


class TestConversion:

    def test_positive_odds(self):
        assert american_to_decimal(100) == pytest.approx(2.0)
        assert american_to_decimal("+150") == pytest.approx(2.5)
        assert american_to_decimal("+200") == pytest.approx(3.0)

    def test_negative_odds(self):
        assert american_to_decimal(-200) == pytest.approx(1.5)
        assert american_to_decimal("-110") == pytest.approx(1.909, abs=0.01)

    def test_decimal_back_to_american(self):
        assert decimal_to_american(4.0) == 300
        assert decimal_to_american(2.0) == 100
        assert decimal_to_american(1.5) == -200

    def test_decimal_at_or_below_one_raises(self):
        with pytest.raises(ValueError):
            decimal_to_american(1.0)


class TestPayout:

    def test_potential_win_positive_quote(self):
        # wager × value / 100
        assert potential_win("+180", 10.0) == pytest.approx(18.0)

    def test_total_payout_includes_stake(self):
        assert total_payout("+180", 10.0) == pytest.approx(28.0)

    def test_negative_quote(self):
        assert potential_win("-200", 20.0) == pytest.approx(10.0)


class TestCombineParlayOdds:

    def test_two_even_money_legs(self):
        # 2.0 × 2.0 = 4.0 → +300
        assert combine_parlay_odds(["+100", "+100"]) == "+300"

    def test_uneven_legs(self):
        # 3.0 × 2.5 = 7.5 → +650
        assert combine_parlay_odds(["+200", "+150"]) == "+650"

    def test_single_leg_unchanged(self):
        assert combine_parlay_odds(["+175"]) == "+175"

    def test_no_legs(self):
        assert combine_parlay_odds([]) is None

    def test_accepts_generator(self):
        assert combine_parlay_odds(o for o in ["+100", "+100"]) == "+300"

    def test_removing_a_leg_never_raises_quote(self):
        legs = ["+120", "+250", "+105"]
        full = parse_american(combine_parlay_odds(legs))
        for i in range(len(legs)):
            fewer = legs[:i] + legs[i + 1:]
            assert parse_american(combine_parlay_odds(fewer)) <= full

    def test_unparseable_leg_raises(self):
        with pytest.raises(ValueError):
            combine_parlay_odds(["+100", "even"])
