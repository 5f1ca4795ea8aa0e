"""
quote_table.py — Print reading-completion quotes across timeframes.

Useful when tuning an odds policy: shows the daily target and the quote for
one book length over a range of timeframes.

Usage
-----
  python scripts/quote_table.py 300                       # medium, fine policy
  python scripts/quote_table.py 300 --difficulty hard
  python scripts/quote_table.py 300 --policy coarse --timeframes "1 Day" "2 Weeks"
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure the project root (one level up from scripts/) is on sys.path so that
# `from readbet.xxx import ...` resolves when the script is run directly.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from readbet.core.odds_policy import POLICY_COARSE, POLICY_FINE, OddsPolicy, quote  # noqa: E402
from readbet.core.schedule import daily_target, resolve_timeframe_days  # noqa: E402
from readbet.models import Difficulty  # noqa: E402

logger = logging.getLogger(__name__)

DEFAULT_TIMEFRAMES = ["1 Day", "3 Days", "1 Week", "2 Weeks", "3 Weeks", "1 Month", "2 Months"]


def build_rows(pages: int, difficulty: Difficulty, policy: OddsPolicy, timeframes: List[str]) -> List[dict]:
    rows = []
    for label in timeframes:
        days = resolve_timeframe_days(label)
        rows.append({
            "timeframe": label,
            "days": days,
            "daily_target": daily_target(pages, days),
            "odds": quote(pages, days, difficulty.multiplier, policy=policy),
        })
    return rows


def format_rows(rows: List[dict]) -> str:
    lines = [f"{'Timeframe':<12}{'Days':>6}{'Per day':>9}{'Odds':>7}"]
    lines.append("-" * len(lines[0]))
    for row in rows:
        lines.append(
            f"{row['timeframe']:<12}{row['days']:>6}{row['daily_target']:>9}{row['odds']:>7}"
        )
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Print a ReadBet quote table for one book length.")
    parser.add_argument("pages", type=int, help="Effective pages in the book.")
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        default=Difficulty.MEDIUM.value,
    )
    parser.add_argument("--policy", choices=[POLICY_FINE, POLICY_COARSE], default=POLICY_FINE)
    parser.add_argument("--timeframes", nargs="+", default=DEFAULT_TIMEFRAMES, metavar="LABEL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.pages <= 0:
        logger.error("pages must be positive, got %d", args.pages)
        return 2

    try:
        rows = build_rows(args.pages, Difficulty(args.difficulty), OddsPolicy.from_name(args.policy), args.timeframes)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    logger.debug("Built %d rows with the %s policy", len(rows), args.policy)
    print(format_rows(rows))
    return 0


if __name__ == "__main__":
    sys.exit(main())
