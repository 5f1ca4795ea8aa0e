"""
Commitment lifecycle management.

    Draft (slip) → Active (ledger, day-tracked) → Settled: won | lost

  confirm()          - move every slip draft into the active set, atomically
  record_session()   - apply a reading session to an active commitment
  check_completion() - settle finished commitments as won (runs after every
                       recorded session or engagement entry)
  settle()           - caller-driven settlement, e.g. forfeiting an overdue
                       commitment; never performed automatically

Every mutating call validates all of its preconditions before touching any
state, so a rejected call leaves the slip and the ledger exactly as they
were.  Every public call holds a re-entrant lock so one ledger can be
shared between an event loop and a background thread; collection
accessors return tuple copies.
"""

import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from readbet.config import EMPTY_SLIP_RAISE, EngineConfig
from readbet.core import odds_policy
from readbet.core.schedule import ScheduleStatus, day_progress, resolve_timeframe_days
from readbet.errors import (
    CommitmentStateError,
    EmptySlipError,
    InsufficientBalanceError,
)
from readbet.models import (
    Book,
    Commitment,
    EngagementCommitment,
    EngagementGoal,
    EngagementType,
    GoalUnit,
    ParlayStatus,
    ParlayTicket,
    ProgressRecord,
    ReadingCommitment,
    SettledCommitment,
    SettlementOutcome,
    utcnow,
)
from readbet.schemas import LedgerSnapshot
from readbet.services.quote_cache import QuoteCache
from readbet.services.slip import CommitmentSlip

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def classify_status(
    commitment: ReadingCommitment,
    position: int,
    now: Optional[datetime] = None,
) -> ScheduleStatus:
    """Schedule status for ``commitment`` with the reader at ``position``.

    Pure: derived from its arguments only, never cached.
    """
    return commitment.status(position, now)


def units_read(start_unit: int, end_unit: int) -> int:
    """Inclusive unit count of a session (``10..19`` → 10)."""
    return max(0, end_unit - start_unit + 1)


def _fresh_progress(commitment: ReadingCommitment, now: datetime) -> ProgressRecord:
    # One unit before the range start means nothing read yet.
    return ProgressRecord(
        commitment_id=commitment.id,
        cumulative_units=0,
        last_position=commitment.effective_start - 1,
        day_units=0,
        sessions=0,
        updated_at=now,
    )


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

class ProgressLedger:
    """
    Owns the slip, the active commitments with their progress, the settled
    history, parlay tickets and (optionally) the reader's balance.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.config = config or EngineConfig()
        self._clock = clock
        self._lock = threading.RLock()

        self.slip = CommitmentSlip()
        self.quotes = QuoteCache()

        self._reading: Dict[uuid.UUID, ReadingCommitment] = {}
        self._engagement: Dict[uuid.UUID, EngagementCommitment] = {}
        self._progress: Dict[uuid.UUID, ProgressRecord] = {}
        self._settled: List[SettledCommitment] = []
        self._parlays: Dict[uuid.UUID, ParlayTicket] = {}
        self._balance: Optional[float] = self.config.starting_balance

    def _now(self, now: Optional[datetime]) -> datetime:
        return now or self._clock()

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    def quote_reading(self, book: Book, timeframe: str, unit: Optional[GoalUnit] = None) -> str:
        """Quote for finishing ``book`` within ``timeframe``."""
        unit = unit or book.goal_unit
        days = resolve_timeframe_days(timeframe)
        with self._lock:
            if unit is GoalUnit.CHAPTERS:
                return self.quotes.get_or_compute(
                    "chapters", book.id, f"{days}:{book.difficulty.value}",
                    lambda: odds_policy.quote_chapters(
                        book.effective_units(GoalUnit.CHAPTERS), days, book.difficulty.multiplier
                    ),
                )
            policy = self.config.policy
            return self.quotes.get_or_compute(
                "reading", book.id, f"{policy.name}:{days}:{book.difficulty.value}",
                lambda: odds_policy.quote(
                    book.effective_units(GoalUnit.PAGES), days, book.difficulty.multiplier, policy=policy
                ),
            )

    def quote_engagement(self, book: Book, note_count: int) -> str:
        band = odds_policy.engagement_band(note_count)
        with self._lock:
            return self.quotes.get_or_compute(
                "engagement", book.id, f"{band}:{book.difficulty.value}",
                lambda: odds_policy.quote_engagement(band, book.difficulty.multiplier),
            )

    def invalidate_quotes(self, book_id: str) -> int:
        """Call after a book's reading preferences change."""
        with self._lock:
            return self.quotes.invalidate(book_id)

    # ------------------------------------------------------------------
    # Drafting
    # ------------------------------------------------------------------

    def has_active_reading(self, book_id: str) -> bool:
        with self._lock:
            return any(c.book.id == book_id for c in self._reading.values())

    def has_active_engagement(self, book_id: str) -> bool:
        with self._lock:
            return any(c.book.id == book_id for c in self._engagement.values())

    def draft_reading(
        self,
        book: Book,
        timeframe: str,
        *,
        odds: Optional[str] = None,
        wager: Optional[float] = None,
        unit: Optional[GoalUnit] = None,
        now: Optional[datetime] = None,
    ) -> ReadingCommitment:
        """Put a reading commitment on the slip, quoting it if ``odds`` is omitted."""
        with self._lock:
            if self.has_active_reading(book.id):
                raise CommitmentStateError(f"Book {book.id!r} already has an active reading commitment.")
            draft = ReadingCommitment.create(
                book,
                timeframe,
                odds or self.quote_reading(book, timeframe, unit),
                self.config.default_wager if wager is None else wager,
                unit=unit,
                now=self._now(now),
            )
            return self.slip.add_reading(draft)

    def draft_engagement(
        self,
        book: Book,
        goals: Iterable[Union[EngagementGoal, Tuple[EngagementType, int]]],
        *,
        odds: Optional[str] = None,
        wager: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> EngagementCommitment:
        """Put an engagement commitment on the slip.

        ``goals`` may be ``EngagementGoal`` objects or ``(kind, target)`` pairs.
        """
        with self._lock:
            if self.has_active_engagement(book.id):
                raise CommitmentStateError(f"Book {book.id!r} already has an active engagement commitment.")
            built = tuple(
                g if isinstance(g, EngagementGoal) else EngagementGoal(kind=EngagementType(g[0]), target_count=g[1])
                for g in goals
            )
            if odds is None:
                odds = self.quote_engagement(book, sum(g.target_count for g in built))
            draft = EngagementCommitment.create(
                book,
                built,
                odds,
                self.config.default_wager if wager is None else wager,
                now=self._now(now),
            )
            return self.slip.add_engagement(draft)

    def update_wager(self, commitment_id: uuid.UUID, wager: float) -> Commitment:
        with self._lock:
            return self.slip.update_wager(commitment_id, wager)

    def remove_draft(self, commitment_id: uuid.UUID) -> Commitment:
        with self._lock:
            return self.slip.remove(commitment_id)

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    def confirm(self, now: Optional[datetime] = None) -> Tuple[Commitment, ...]:
        """Move every draft on the slip into the active set.

        All-or-nothing: every check runs before the slip or ledger changes.

        Raises:
            EmptySlipError: Slip is empty and the config's empty-slip
                policy is ``"raise"`` (with ``"noop"`` an empty tuple is
                returned and nothing changes).
            InsufficientBalanceError: Balance tracking is on and the slip's
                total wager exceeds the balance.
            CommitmentStateError: A drafted book gained an active commitment
                of the same kind after it was drafted.
        """
        with self._lock:
            now = self._now(now)
            if self.slip.is_empty:
                if self.config.empty_slip_policy == EMPTY_SLIP_RAISE:
                    raise EmptySlipError("Cannot confirm an empty slip.")
                logger.info("confirm() on empty slip ignored")
                return ()

            total_wager = self.slip.total_wager
            if self._balance is not None and total_wager > self._balance:
                raise InsufficientBalanceError(
                    f"Slip wager {total_wager:.2f} exceeds balance {self._balance:.2f}."
                )
            for draft in self.slip.reading_drafts:
                if self.has_active_reading(draft.book.id):
                    raise CommitmentStateError(f"Book {draft.book.id!r} already has an active reading commitment.")
            for draft in self.slip.engagement_drafts:
                if self.has_active_engagement(draft.book.id):
                    raise CommitmentStateError(f"Book {draft.book.id!r} already has an active engagement commitment.")

            reading = [d.restarted(now) for d in self.slip.reading_drafts]
            engagement = [replace(d, created_at=now) for d in self.slip.engagement_drafts]
            progress = {c.id: _fresh_progress(c, now) for c in reading}

            ticket = None
            if self.slip.is_parlay:
                ticket = ParlayTicket(
                    id=uuid.uuid4(),
                    leg_ids=tuple(c.id for c in (*reading, *engagement)),
                    combined_odds=self.slip.combined_odds(),
                    wager=total_wager,
                    placed_at=now,
                )

            # --- commit -------------------------------------------------
            self._reading.update((c.id, c) for c in reading)
            self._engagement.update((c.id, c) for c in engagement)
            self._progress.update(progress)
            if ticket is not None:
                self._parlays[ticket.id] = ticket
            if self._balance is not None:
                self._balance -= total_wager
            self.slip.clear()

            logger.info(
                "Confirmed %d reading + %d engagement commitments (wager %.2f%s)",
                len(reading), len(engagement), total_wager,
                f", parlay {ticket.combined_odds}" if ticket else "",
            )
            return tuple(reading) + tuple(engagement)

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def _require_reading(self, commitment_id: uuid.UUID) -> ReadingCommitment:
        commitment = self._reading.get(commitment_id)
        if commitment is not None:
            return commitment
        raise CommitmentStateError(self._describe_missing(commitment_id, "active reading"))

    def _require_engagement(self, commitment_id: uuid.UUID) -> EngagementCommitment:
        commitment = self._engagement.get(commitment_id)
        if commitment is not None:
            return commitment
        raise CommitmentStateError(self._describe_missing(commitment_id, "active engagement"))

    def _describe_missing(self, commitment_id: uuid.UUID, wanted: str) -> str:
        if self.slip.get(commitment_id) is not None:
            state = "still a draft on the slip"
        elif any(s.commitment_id == commitment_id for s in self._settled):
            state = "already settled"
        elif commitment_id in self._reading or commitment_id in self._engagement:
            state = "a different kind of commitment"
        else:
            state = "unknown"
        return f"Commitment {commitment_id} is not an {wanted} commitment: {state}."

    def record_session(
        self,
        commitment_id: uuid.UUID,
        start_unit: int,
        end_unit: int,
        now: Optional[datetime] = None,
    ) -> ProgressRecord:
        """Apply a reading session covering ``start_unit..end_unit`` inclusive.

        Positions outside the effective range are clamped to it; a session
        entirely before the range counts zero units.  The reading position
        never moves backwards, so re-reading earlier pages keeps progress.  Runs
        :meth:`check_completion` afterwards; the returned record is the
        state after the session even if the commitment then settled.

        Raises:
            CommitmentStateError: Commitment is not active.
        """
        with self._lock:
            now = self._now(now)
            commitment = self._require_reading(commitment_id)

            first, last = commitment.effective_start, commitment.effective_end
            start = min(max(start_unit, first), last + 1)
            end = max(min(end_unit, last), first - 1)
            if (start, end) != (start_unit, end_unit):
                logger.warning(
                    "Session %d-%d on %r clamped to %d-%d (effective range %d-%d)",
                    start_unit, end_unit, commitment.book.title, start, end,
                    commitment.effective_start, commitment.effective_end,
                )

            previous = self._progress.get(commitment_id) or _fresh_progress(commitment, now)
            position = max(previous.last_position, end)
            today = commitment.day_range(commitment.current_day(now))
            record = ProgressRecord(
                commitment_id=commitment_id,
                cumulative_units=previous.cumulative_units + units_read(start, end),
                last_position=position,
                day_units=day_progress(position, today),
                sessions=previous.sessions + 1,
                updated_at=now,
            )
            self._progress[commitment_id] = record
            logger.debug(
                "Session on %r: %d units, position %d, day %d %d/%d",
                commitment.book.title, units_read(start, end), position,
                today.day, record.day_units, today.target,
            )

            self.check_completion(now)
            return record

    def record_engagement(
        self,
        commitment_id: uuid.UUID,
        kind: EngagementType,
        increment: int = 1,
        entry: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> EngagementCommitment:
        """Count a journal entry toward an engagement goal."""
        if increment < 1:
            raise ValueError(f"increment must be ≥ 1, got {increment!r}")
        with self._lock:
            commitment = self._require_engagement(commitment_id)
            updated = commitment.with_progress(EngagementType(kind), increment, entry)
            self._engagement[commitment_id] = updated
            self.check_completion(self._now(now))
            return updated

    def check_completion(self, now: Optional[datetime] = None) -> List[SettledCommitment]:
        """Settle every active commitment that has reached its goal as won."""
        with self._lock:
            now = self._now(now)
            finished: List[SettledCommitment] = []
            for commitment in self._reading.values():
                record = self._progress.get(commitment.id)
                if record is not None and record.last_position >= commitment.effective_end:
                    finished.append(self._settlement(commitment, now, SettlementOutcome.WON))
            for commitment in self._engagement.values():
                if commitment.is_complete:
                    finished.append(self._settlement(commitment, now, SettlementOutcome.WON))

            for settled in finished:
                self._retire(settled)
            return finished

    # ------------------------------------------------------------------
    # Day management
    # ------------------------------------------------------------------

    def status(self, commitment_id: uuid.UUID, now: Optional[datetime] = None) -> ScheduleStatus:
        with self._lock:
            commitment = self._require_reading(commitment_id)
            return classify_status(commitment, self.position(commitment_id), self._now(now))

    def can_advance_day(self, commitment_id: uuid.UUID, now: Optional[datetime] = None) -> bool:
        with self._lock:
            commitment = self._require_reading(commitment_id)
            return commitment.can_advance(self.position(commitment_id), self._now(now))

    def advance_day(self, commitment_id: uuid.UUID, now: Optional[datetime] = None) -> ReadingCommitment:
        """Start the next day early once today's range is read.

        Raises:
            CommitmentStateError: Today's range is unfinished or today is
                the final day.
        """
        with self._lock:
            now = self._now(now)
            commitment = self._require_reading(commitment_id)
            if not commitment.can_advance(self.position(commitment_id), now):
                raise CommitmentStateError(
                    f"Cannot advance {commitment.book.title!r} past day "
                    f"{commitment.current_day(now)} of {commitment.total_days}."
                )
            advanced = commitment.advanced(now)
            self._reading[commitment_id] = advanced
            logger.info(
                "Advanced %r to day %d of %d",
                commitment.book.title, advanced.current_day(now), advanced.total_days,
            )
            return advanced

    def overdue(self, now: Optional[datetime] = None) -> Tuple[ReadingCommitment, ...]:
        """Active commitments past their last day; advisory only."""
        now = self._now(now)
        with self._lock:
            return tuple(
                c for c in tuple(self._reading.values())
                if self.status(c.id, now) is ScheduleStatus.OVERDUE
            )

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def settle(
        self,
        commitment_id: uuid.UUID,
        *,
        won: bool = False,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SettledCommitment:
        """Settle an active commitment on the caller's decision."""
        with self._lock:
            now = self._now(now)
            commitment = self._reading.get(commitment_id) or self._engagement.get(commitment_id)
            if commitment is None:
                raise CommitmentStateError(self._describe_missing(commitment_id, "active"))
            outcome = SettlementOutcome.WON if won else SettlementOutcome.LOST
            settled = self._settlement(commitment, now, outcome, reason)
            self._retire(settled)
            return settled

    def _settlement(
        self,
        commitment: Commitment,
        now: datetime,
        outcome: SettlementOutcome,
        reason: Optional[str] = None,
    ) -> SettledCommitment:
        if isinstance(commitment, ReadingCommitment):
            record = self._progress.get(commitment.id)
            consumed = record.cumulative_units if record else 0
        else:
            consumed = commitment.total_current_count
        payout = commitment.total_payout if outcome is SettlementOutcome.WON else 0.0
        return SettledCommitment(
            commitment=commitment,
            settled_at=now,
            units_consumed=consumed,
            outcome=outcome,
            payout=round(payout, 2),
            reason=reason,
        )

    def _retire(self, settled: SettledCommitment) -> None:
        cid = settled.commitment_id
        self._reading.pop(cid, None)
        self._engagement.pop(cid, None)
        self._progress.pop(cid, None)
        self._settled.append(settled)
        if self._balance is not None:
            self._balance += settled.payout
        logger.info(
            "Settled %r %s (payout %.2f%s)",
            settled.commitment.book.title, settled.outcome.value, settled.payout,
            f", {settled.reason}" if settled.reason else "",
        )

    # ------------------------------------------------------------------
    # Parlays
    # ------------------------------------------------------------------

    def parlay_status(self, ticket_id: uuid.UUID) -> ParlayStatus:
        ticket = self._require_parlay(ticket_id)
        outcomes = self._leg_outcomes(ticket)
        if SettlementOutcome.LOST in outcomes.values():
            return ParlayStatus.LOST
        if len(outcomes) == len(ticket.leg_ids):
            return ParlayStatus.WON
        return ParlayStatus.IN_PROGRESS

    def parlay_progress(self, ticket_id: uuid.UUID) -> float:
        """Fraction of legs settled as won."""
        ticket = self._require_parlay(ticket_id)
        won = sum(1 for o in self._leg_outcomes(ticket).values() if o is SettlementOutcome.WON)
        return won / len(ticket.leg_ids) if ticket.leg_ids else 0.0

    def _require_parlay(self, ticket_id: uuid.UUID) -> ParlayTicket:
        ticket = self._parlays.get(ticket_id)
        if ticket is None:
            raise CommitmentStateError(f"Unknown parlay ticket {ticket_id}.")
        return ticket

    def _leg_outcomes(self, ticket: ParlayTicket) -> Dict[uuid.UUID, SettlementOutcome]:
        legs = set(ticket.leg_ids)
        with self._lock:
            return {s.commitment_id: s.outcome for s in self._settled if s.commitment_id in legs}

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def active_reading(self) -> Tuple[ReadingCommitment, ...]:
        with self._lock:
            return tuple(self._reading.values())

    @property
    def active_engagement(self) -> Tuple[EngagementCommitment, ...]:
        with self._lock:
            return tuple(self._engagement.values())

    @property
    def settled(self) -> Tuple[SettledCommitment, ...]:
        with self._lock:
            return tuple(self._settled)

    @property
    def parlays(self) -> Tuple[ParlayTicket, ...]:
        with self._lock:
            return tuple(self._parlays.values())

    @property
    def balance(self) -> Optional[float]:
        return self._balance

    def get_reading(self, commitment_id: uuid.UUID) -> ReadingCommitment:
        return self._require_reading(commitment_id)

    def get_engagement(self, commitment_id: uuid.UUID) -> EngagementCommitment:
        return self._require_engagement(commitment_id)

    def progress(self, commitment_id: uuid.UUID) -> ProgressRecord:
        with self._lock:
            commitment = self._require_reading(commitment_id)
            return self._progress.get(commitment_id) or _fresh_progress(commitment, commitment.start_date)

    def position(self, commitment_id: uuid.UUID) -> int:
        return self.progress(commitment_id).last_position

    # ------------------------------------------------------------------
    # Persistence hand-off
    # ------------------------------------------------------------------

    def snapshot(self) -> LedgerSnapshot:
        """Serializable record of the confirmed state (the slip is not included)."""
        with self._lock:
            return LedgerSnapshot.build(
                reading=self.active_reading,
                engagement=self.active_engagement,
                progress=tuple(self._progress.values()),
                settled=self.settled,
                parlays=self.parlays,
                balance=self._balance,
            )

    @classmethod
    def restore(
        cls,
        snapshot: LedgerSnapshot,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> "ProgressLedger":
        """Rebuild a ledger from :meth:`snapshot` output."""
        ledger = cls(config=config, clock=clock)
        ledger._reading = {c.id: c for c in snapshot.reading_commitments()}
        ledger._engagement = {c.id: c for c in snapshot.engagement_commitments()}
        ledger._progress = {p.commitment_id: p for p in snapshot.progress_records()}
        ledger._settled = list(snapshot.settled_commitments())
        ledger._parlays = {t.id: t for t in snapshot.parlay_tickets()}
        ledger._balance = snapshot.balance
        return ledger
