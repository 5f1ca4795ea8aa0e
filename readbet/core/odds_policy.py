"""Quoting policies — every constant that shapes a quote lives here.

Two historical formulas exist for the reading-completion quote.  Both are
kept as named :class:`OddsPolicy` instances so historical quotes stay
reproducible:

* :meth:`OddsPolicy.fine_grained` — four buckets keyed on the day count,
  ``K = 40``, clamp ``[105, 999]``.  This is the default.
* :meth:`OddsPolicy.coarse` — the original day/week/month buckets,
  ``K = 50``, clamp ``[110, 800]``.

Algorithm (both policies)::

    units_per_day     = effective_units / timeframe_days
    difficulty_factor = min(units_per_day / divisor, cap)      (bucket)
    raw               = 100 + floor(difficulty_factor × multiplier × K)
    quote             = "+" + clamp(raw, min_odds, max_odds)

Within one bucket the quote is non-decreasing in ``units_per_day`` and in
the difficulty multiplier, and is always inside the clamp range.

Typical usage::

    from readbet.core.odds_policy import OddsPolicy, quote

    quote(300, 10, 1.0)                                  → "+200"
    quote(300, 7, 1.0, policy=OddsPolicy.coarse())       → "+250"

Run tests with::

    pytest tests/test_odds_policy.py -v
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final, Tuple

from readbet.core.odds_math import format_american

#: Policy names accepted by :meth:`OddsPolicy.from_name`.
POLICY_FINE: Final[str] = "fine"
POLICY_COARSE: Final[str] = "coarse"


@dataclass(frozen=True)
class TimeframeBucket:
    """One timeframe bucket: applies when ``timeframe_days <= max_days``."""

    max_days: float
    divisor: float
    cap: float


@dataclass(frozen=True)
class OddsPolicy:
    """Immutable quoting constants for reading-completion goals.

    Attributes:
        name: Short identifier (``"fine"`` or ``"coarse"``).
        buckets: Ordered buckets; the first whose ``max_days`` covers the
            timeframe supplies the divisor and cap.  The last bucket must
            be unbounded (``math.inf``).
        scale: Constant ``K`` applied to ``factor × multiplier``.
        min_odds: Lower clamp on the quote value.
        max_odds: Upper clamp on the quote value.
    """

    name: str
    buckets: Tuple[TimeframeBucket, ...]
    scale: float
    min_odds: int
    max_odds: int

    @classmethod
    def fine_grained(cls) -> "OddsPolicy":
        """Four buckets; shorter timeframes are harsher."""
        return cls(
            name=POLICY_FINE,
            buckets=(
                TimeframeBucket(max_days=3, divisor=15.0, cap=10.0),
                TimeframeBucket(max_days=7, divisor=20.0, cap=8.0),
                TimeframeBucket(max_days=21, divisor=12.0, cap=4.0),
                TimeframeBucket(max_days=math.inf, divisor=8.0, cap=2.0),
            ),
            scale=40.0,
            min_odds=105,
            max_odds=999,
        )

    @classmethod
    def coarse(cls) -> "OddsPolicy":
        """Day / week / month buckets from the first quoting screen."""
        return cls(
            name=POLICY_COARSE,
            buckets=(
                TimeframeBucket(max_days=1, divisor=20.0, cap=8.0),
                TimeframeBucket(max_days=7, divisor=10.0, cap=3.0),
                TimeframeBucket(max_days=math.inf, divisor=5.0, cap=1.5),
            ),
            scale=50.0,
            min_odds=110,
            max_odds=800,
        )

    @classmethod
    def from_name(cls, name: str) -> "OddsPolicy":
        """Look up a policy by name (case-insensitive)."""
        key = (name or "").strip().lower()
        if key == POLICY_FINE:
            return cls.fine_grained()
        if key == POLICY_COARSE:
            return cls.coarse()
        raise ValueError(
            f"Unknown odds policy {name!r}; expected {POLICY_FINE!r} or {POLICY_COARSE!r}."
        )

    def bucket_for(self, timeframe_days: int) -> TimeframeBucket:
        for bucket in self.buckets:
            if timeframe_days <= bucket.max_days:
                return bucket
        return self.buckets[-1]

    def difficulty_factor(self, units_per_day: float, timeframe_days: int) -> float:
        bucket = self.bucket_for(timeframe_days)
        return min(units_per_day / bucket.divisor, bucket.cap)


# ---------------------------------------------------------------------------
# Reading-completion quote
# ---------------------------------------------------------------------------


def quote_value(
    effective_units: int,
    timeframe_days: int,
    difficulty_multiplier: float,
    *,
    policy: OddsPolicy | None = None,
) -> int:
    """Integer quote for finishing ``effective_units`` in ``timeframe_days``.

    ``timeframe_days`` must be positive; callers validate it before
    quoting (see :func:`readbet.core.schedule.resolve_timeframe_days`).
    """
    policy = policy or OddsPolicy.fine_grained()
    units_per_day = effective_units / timeframe_days
    factor = policy.difficulty_factor(units_per_day, timeframe_days)
    raw = 100 + math.floor(factor * difficulty_multiplier * policy.scale)
    return min(max(raw, policy.min_odds), policy.max_odds)


def quote(
    effective_units: int,
    timeframe_days: int,
    difficulty_multiplier: float,
    *,
    policy: OddsPolicy | None = None,
) -> str:
    """Formatted quote string, e.g. ``"+180"``."""
    return format_american(
        quote_value(effective_units, timeframe_days, difficulty_multiplier, policy=policy)
    )


# ---------------------------------------------------------------------------
# Chapter-goal quote
# ---------------------------------------------------------------------------

#: (chapters-per-day upper bound, base odds).  Last entry is unbounded.
_CHAPTER_BASE_ODDS: Final[Tuple[Tuple[float, int], ...]] = (
    (1.0, 110),
    (2.0, 130),
    (3.0, 160),
    (math.inf, 200),
)
_CHAPTER_MIN_ODDS: Final[int] = 105
_CHAPTER_MAX_ODDS: Final[int] = 500
_NO_CHAPTERS_QUOTE: Final[str] = "+110"


def quote_chapters(
    effective_chapters: int,
    timeframe_days: int,
    difficulty_multiplier: float,
) -> str:
    """Quote a chapter-based reading goal.

    The base price steps up with chapters per day and is then stretched
    away from even money by the difficulty multiplier::

        final = base + floor((base − 100) × (multiplier − 1))

    A book without chapters quotes ``"+110"``.
    """
    if effective_chapters <= 0:
        return _NO_CHAPTERS_QUOTE

    chapters_per_day = effective_chapters / timeframe_days
    base = next(odds for bound, odds in _CHAPTER_BASE_ODDS if chapters_per_day < bound)
    final = base + math.floor((base - 100) * (difficulty_multiplier - 1.0))
    return format_american(min(max(final, _CHAPTER_MIN_ODDS), _CHAPTER_MAX_ODDS))


# ---------------------------------------------------------------------------
# Engagement (journal) quote
# ---------------------------------------------------------------------------

#: Note-count band → difficulty factor.
ENGAGEMENT_BANDS: Final[dict] = {
    "1-3": 0.5,
    "4-7": 1.0,
    "8+": 2.0,
}
_ENGAGEMENT_SCALE: Final[float] = 30.0
_ENGAGEMENT_MIN_ODDS: Final[int] = 105
_ENGAGEMENT_MAX_ODDS: Final[int] = 400


def engagement_band(note_count: int) -> str:
    """Band label for a total note target (``5`` → ``"4-7"``)."""
    if note_count <= 3:
        return "1-3"
    if note_count <= 7:
        return "4-7"
    return "8+"


def quote_engagement(band: str, difficulty_multiplier: float) -> str:
    """Quote an engagement goal for a note-count band.

    Unknown bands price like the middle band.
    """
    factor = ENGAGEMENT_BANDS.get(band, 1.0)
    raw = 100 + math.floor(factor * difficulty_multiplier * _ENGAGEMENT_SCALE)
    return format_american(min(max(raw, _ENGAGEMENT_MIN_ODDS), _ENGAGEMENT_MAX_ODDS))
