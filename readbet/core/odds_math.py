"""Odds arithmetic — the single source of truth for quote strings.

Every function here is **pure**: no I/O, no logging, no side effects.
Import from this module; never reparse odds strings locally in services.

Quotes travel through the engine as American-odds strings (``"+180"``)
because that is what the slip and the presentation layer display.  All
arithmetic happens on decimal multipliers:

1. **Parsing / formatting** — ``"+180"`` ↔ ``180``.
2. **Conversion** — American ↔ decimal.
3. **Payout** — potential win and total payout for a wager.
4. **Parlay combination** — product of leg multipliers.

Design decisions
----------------
* Malformed odds strings raise ``ValueError`` instead of silently falling
  back to a default price.  A wrong quote on a staked commitment is worse
  than a loud failure at draft time.
* Parlay legs are combined multiplicatively on decimal odds, so removing a
  leg can never raise the combined quote: every leg multiplier is ≥ 1.0.

Run tests with::

    pytest tests/test_odds_math.py -v
"""

from __future__ import annotations

import math
import re
from typing import Final, Iterable, Optional

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

#: American-odds magnitude floor.  Values in (-100, +100) are not
#: representable as American odds.
_MIN_ODDS_MAGNITUDE: Final[int] = 100

_ODDS_PATTERN: Final[re.Pattern] = re.compile(r"^\s*([+-]?)\s*(\d+)\s*$")


# ---------------------------------------------------------------------------
# Parsing and formatting
# ---------------------------------------------------------------------------


def parse_american(odds: str | int | float) -> int:
    """Parse an American-odds quote into its signed integer value.

    Examples::

        parse_american("+180") → 180
        parse_american("250")  → 250
        parse_american("-110") → -110

    Raises:
        ValueError: If the string is not a signed integer or its magnitude
            is below 100.
    """
    if isinstance(odds, (int, float)):
        value = int(odds)
    else:
        match = _ODDS_PATTERN.match(odds or "")
        if match is None:
            raise ValueError(f"Unparseable odds {odds!r}: expected a quote like '+180'.")
        sign, digits = match.groups()
        value = -int(digits) if sign == "-" else int(digits)
    if abs(value) < _MIN_ODDS_MAGNITUDE:
        raise ValueError(
            f"Invalid American odds {odds!r}: magnitude must be ≥ 100."
        )
    return value


def format_american(value: int) -> str:
    """Format an integer quote with an explicit sign (``180`` → ``"+180"``)."""
    return f"{int(value):+d}"


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def american_to_decimal(american: int | float | str) -> float:
    """Convert American odds to decimal (total return per unit staked).

    Examples::

        american_to_decimal(+100)   → 2.0
        american_to_decimal("+150") → 2.5
        american_to_decimal(-200)   → 1.5
    """
    value = parse_american(american)
    if value > 0:
        return value / 100.0 + 1.0
    return 100.0 / abs(value) + 1.0


def decimal_to_american(decimal_odds: float) -> int:
    """Convert decimal odds to the nearest American integer.

    Values ≥ 2.0 are returned as positive (underdog) quotes, values below
    2.0 as negative (favourite) quotes.

    Raises:
        ValueError: If ``decimal_odds`` is not strictly above 1.0.
    """
    if decimal_odds <= 1.0:
        raise ValueError(
            f"Decimal odds {decimal_odds!r} must be > 1.0 to express as American odds."
        )
    if decimal_odds >= 2.0:
        return round((decimal_odds - 1.0) * 100)
    return round(-100.0 / (decimal_odds - 1.0))


# ---------------------------------------------------------------------------
# Payout
# ---------------------------------------------------------------------------


def potential_win(odds: str | int, wager: float) -> float:
    """Profit returned on a winning wager, excluding the stake.

    For positive quotes this is ``wager × value / 100``.
    """
    return wager * (american_to_decimal(odds) - 1.0)


def total_payout(odds: str | int, wager: float) -> float:
    """Stake plus profit on a winning wager."""
    return wager + potential_win(odds, wager)


# ---------------------------------------------------------------------------
# Parlay combination
# ---------------------------------------------------------------------------


def combine_parlay_odds(leg_odds: Iterable[str]) -> Optional[str]:
    """Combine leg quotes into a single parlay quote.

    Each leg is converted to a decimal multiplier ``1 + value/100``, the
    multipliers are multiplied, and the product is converted back::

        combine_parlay_odds(["+100", "+100"]) → "+300"   (2.0 × 2.0 = 4.0)

    A single leg returns its own quote unchanged; no legs returns ``None``.
    """
    legs = list(leg_odds)
    if not legs:
        return None
    if len(legs) == 1:
        return legs[0]

    product = math.prod(american_to_decimal(odds) for odds in legs)
    return format_american(decimal_to_american(product))
