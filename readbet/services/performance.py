"""
Performance analytics over settled commitments.

Public functions take any iterable of ``SettledCommitment`` and return plain
dicts so a presentation layer can render them without importing the ledger.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from readbet.models import ReadingCommitment, SettledCommitment

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _safe_roi(profit: float, risked: float) -> float:
    return round(profit / risked, 4) if risked > 0 else 0.0


def _win_rate(wins: int, total: int) -> float:
    return round(wins / total, 4) if total > 0 else 0.0


def _mean(values: List[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


# ---------------------------------------------------------------------------
# calculate_summary_stats
# ---------------------------------------------------------------------------

def calculate_summary_stats(
    settled: Iterable[SettledCommitment],
    since: Optional[datetime] = None,
) -> Dict:
    """
    Headline numbers for the settled ledger.

    Returns a dict with counts, win rate, money wagered and returned, net
    profit, ROI, and the mean number of days reading commitments took.
    """
    rows = [s for s in settled if since is None or s.settled_at >= since]
    if not rows:
        return {
            "total_settled": 0,
            "wins": 0,
            "losses": 0,
            "win_rate": 0.0,
            "total_wagered": 0.0,
            "total_payout": 0.0,
            "net_profit": 0.0,
            "roi": 0.0,
            "units_consumed": 0,
            "mean_days_to_finish": None,
        }

    wins = [s for s in rows if s.was_successful]
    wagered = sum(s.commitment.wager for s in rows)
    paid = sum(s.payout for s in rows)
    profit = paid - wagered

    finish_days = [
        (s.settled_at.date() - s.commitment.start_date.date()).days + 1
        for s in wins
        if isinstance(s.commitment, ReadingCommitment)
    ]

    summary = {
        "total_settled": len(rows),
        "wins": len(wins),
        "losses": len(rows) - len(wins),
        "win_rate": _win_rate(len(wins), len(rows)),
        "total_wagered": round(wagered, 2),
        "total_payout": round(paid, 2),
        "net_profit": round(profit, 2),
        "roi": _safe_roi(profit, wagered),
        "units_consumed": sum(s.units_consumed for s in rows),
        "mean_days_to_finish": _mean(finish_days),
    }
    logger.debug("Summary over %d settled commitments: %s", len(rows), summary)
    return summary


def calculate_breakdown_by_kind(settled: Iterable[SettledCommitment]) -> Dict[str, Dict]:
    """Summary stats split into ``"reading"`` and ``"engagement"``."""
    rows = list(settled)
    reading = [s for s in rows if isinstance(s.commitment, ReadingCommitment)]
    engagement = [s for s in rows if not isinstance(s.commitment, ReadingCommitment)]
    return {
        "reading": calculate_summary_stats(reading),
        "engagement": calculate_summary_stats(engagement),
    }
