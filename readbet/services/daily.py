"""
Per-day views and status summaries for the presentation collaborator.

Everything here is derived on demand from the ledger's commitments and
positions; nothing is stored.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from readbet.core.schedule import ScheduleStatus, day_progress
from readbet.models import ReadingCommitment, utcnow
from readbet.services.ledger import ProgressLedger

logger = logging.getLogger(__name__)

#: Sort order for "what should I read next": most urgent first.
STATUS_PRIORITY: Dict[ScheduleStatus, int] = {
    ScheduleStatus.OVERDUE: 0,
    ScheduleStatus.BEHIND: 1,
    ScheduleStatus.ON_TRACK: 2,
    ScheduleStatus.AHEAD: 3,
    ScheduleStatus.COMPLETED: 4,
}


@dataclass(frozen=True)
class DayView:
    """One day of a reading commitment, as shown in the daily list."""

    commitment_id: uuid.UUID
    book_title: str
    day: int
    total_days: int
    start_unit: int
    end_unit: int
    target: int
    progress: int
    is_current: bool
    is_overdue: bool
    can_advance: bool

    @property
    def is_complete(self) -> bool:
        return self.progress >= self.target

    @property
    def progress_ratio(self) -> float:
        if self.target <= 0:
            return 0.0
        return min(self.progress / self.target, 1.0)

    @property
    def days_remaining(self) -> int:
        return max(0, self.total_days - self.day + 1)

    @property
    def unit_range(self) -> str:
        return f"{self.start_unit}-{self.end_unit}"


@dataclass(frozen=True)
class StatusSummary:
    on_track: int = 0
    ahead: int = 0
    behind: int = 0
    overdue: int = 0
    completed: int = 0

    @property
    def needs_attention(self) -> bool:
        return self.overdue > 0 or self.behind > 0


def day_views_for(
    commitment: ReadingCommitment,
    position: int,
    now: Optional[datetime] = None,
) -> List[DayView]:
    """Views for days 1 through the current day.

    Later days stay hidden until the reader reaches them or advances.
    """
    now = now or utcnow()
    today = commitment.current_day(now)
    overdue = commitment.is_overdue(now)
    can_advance = commitment.can_advance(position, now)

    views = []
    for day in range(1, today + 1):
        owed = commitment.day_range(day)
        is_current = day == today
        views.append(DayView(
            commitment_id=commitment.id,
            book_title=commitment.book.title,
            day=day,
            total_days=commitment.total_days,
            start_unit=owed.start_unit,
            end_unit=owed.end_unit,
            target=owed.target,
            progress=day_progress(position, owed),
            is_current=is_current,
            is_overdue=overdue and is_current,
            can_advance=can_advance and is_current,
        ))
    return views


def day_views(ledger: ProgressLedger, now: Optional[datetime] = None) -> List[DayView]:
    """Day views for every active reading commitment, grouped by title then day."""
    now = now or utcnow()
    views: List[DayView] = []
    for commitment in ledger.active_reading:
        views.extend(day_views_for(commitment, ledger.position(commitment.id), now))
    views.sort(key=lambda v: (v.book_title, v.day))
    return views


def statuses(ledger: ProgressLedger, now: Optional[datetime] = None) -> Dict[uuid.UUID, ScheduleStatus]:
    now = now or utcnow()
    return {c.id: ledger.status(c.id, now) for c in ledger.active_reading}


def status_summary(ledger: ProgressLedger, now: Optional[datetime] = None) -> StatusSummary:
    counts = {status: 0 for status in ScheduleStatus}
    for status in statuses(ledger, now).values():
        counts[status] += 1
    summary = StatusSummary(
        on_track=counts[ScheduleStatus.ON_TRACK],
        ahead=counts[ScheduleStatus.AHEAD],
        behind=counts[ScheduleStatus.BEHIND],
        overdue=counts[ScheduleStatus.OVERDUE],
        completed=counts[ScheduleStatus.COMPLETED],
    )
    if summary.needs_attention:
        logger.info("%d overdue, %d behind schedule", summary.overdue, summary.behind)
    return summary


def prioritized(
    ledger: ProgressLedger, now: Optional[datetime] = None
) -> List[Tuple[ReadingCommitment, ScheduleStatus]]:
    """Active reading commitments, most urgent first, then by title."""
    now = now or utcnow()
    by_id = statuses(ledger, now)
    pairs = [(c, by_id[c.id]) for c in ledger.active_reading]
    pairs.sort(key=lambda pair: (STATUS_PRIORITY[pair[1]], pair[0].book.title))
    return pairs
