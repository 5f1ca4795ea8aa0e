"""
Draft commitment slip.

Holds reading and engagement drafts before they are confirmed into the
ledger.  Each category keeps at most one draft per book: drafting a book
again replaces the earlier draft.  With more than one draft the slip is a
parlay and quotes a combined price (product of decimal leg multipliers).
"""

import logging
import uuid
from typing import List, Optional, Tuple

from readbet.core.odds_math import combine_parlay_odds, potential_win
from readbet.errors import CommitmentStateError
from readbet.models import Commitment, EngagementCommitment, ReadingCommitment

logger = logging.getLogger(__name__)


class CommitmentSlip:
    """Mutable staging area for draft commitments."""

    def __init__(self):
        self._reading: List[ReadingCommitment] = []
        self._engagement: List[EngagementCommitment] = []

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    def add_reading(self, draft: ReadingCommitment) -> ReadingCommitment:
        """Add a reading draft, replacing any draft for the same book."""
        replaced = self._drop_book(self._reading, draft.book.id)
        self._reading.append(draft)
        logger.debug(
            "Slip: reading draft %s for %r @ %s (%s)%s",
            draft.id, draft.book.title, draft.odds, draft.timeframe,
            " [replaced]" if replaced else "",
        )
        return draft

    def add_engagement(self, draft: EngagementCommitment) -> EngagementCommitment:
        """Add an engagement draft, replacing any draft for the same book."""
        replaced = self._drop_book(self._engagement, draft.book.id)
        self._engagement.append(draft)
        logger.debug(
            "Slip: engagement draft %s for %r @ %s%s",
            draft.id, draft.book.title, draft.odds, " [replaced]" if replaced else "",
        )
        return draft

    def remove(self, commitment_id: uuid.UUID) -> Commitment:
        """Remove a draft from either category."""
        for drafts in (self._reading, self._engagement):
            for i, draft in enumerate(drafts):
                if draft.id == commitment_id:
                    return drafts.pop(i)
        raise CommitmentStateError(f"No draft {commitment_id} on the slip.")

    def update_wager(self, commitment_id: uuid.UUID, wager: float) -> Commitment:
        for drafts in (self._reading, self._engagement):
            for i, draft in enumerate(drafts):
                if draft.id == commitment_id:
                    drafts[i] = draft.with_wager(wager)
                    return drafts[i]
        raise CommitmentStateError(f"No draft {commitment_id} on the slip.")

    def get(self, commitment_id: uuid.UUID) -> Optional[Commitment]:
        return next((d for d in self.legs if d.id == commitment_id), None)

    def clear(self) -> None:
        self._reading.clear()
        self._engagement.clear()

    @staticmethod
    def _drop_book(drafts: list, book_id: str) -> bool:
        before = len(drafts)
        drafts[:] = [d for d in drafts if d.book.id != book_id]
        return len(drafts) != before

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def reading_drafts(self) -> Tuple[ReadingCommitment, ...]:
        return tuple(self._reading)

    @property
    def engagement_drafts(self) -> Tuple[EngagementCommitment, ...]:
        return tuple(self._engagement)

    @property
    def legs(self) -> Tuple[Commitment, ...]:
        return tuple(self._reading) + tuple(self._engagement)

    @property
    def total_count(self) -> int:
        return len(self._reading) + len(self._engagement)

    @property
    def is_empty(self) -> bool:
        return self.total_count == 0

    @property
    def is_parlay(self) -> bool:
        return self.total_count > 1

    def contains_book(self, book_id: str) -> bool:
        return any(d.book.id == book_id for d in self.legs)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    @property
    def total_wager(self) -> float:
        return sum(d.wager for d in self.legs)

    @property
    def total_potential_win(self) -> float:
        return sum(d.potential_win for d in self.legs)

    @property
    def total_payout(self) -> float:
        return self.total_wager + self.total_potential_win

    def combined_odds(self) -> Optional[str]:
        """Parlay quote across all legs; a single leg keeps its own quote."""
        return combine_parlay_odds(d.odds for d in self.legs)

    def parlay_potential_win(self) -> float:
        """Profit if the whole slip were staked as one parlay ticket."""
        combined = self.combined_odds()
        if combined is None:
            return 0.0
        return potential_win(combined, self.total_wager)
