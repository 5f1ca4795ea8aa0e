"""
Pydantic records handed to the persistence collaborator.

The engine does not know how records are stored.  Every domain object that
outlives a process has a record here with ``from_domain`` / ``to_domain``
converters; ``LedgerSnapshot.model_dump(mode="json")`` is plain JSON.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from readbet.core import odds_math
from readbet.core.schedule import Advanced, DayClock, Scheduled
from readbet.models import (
    Book,
    CountingStyle,
    Difficulty,
    EngagementCommitment,
    EngagementGoal,
    EngagementType,
    GoalUnit,
    ParlayTicket,
    ProgressRecord,
    ReadingCommitment,
    ReadingPreferences,
    SettledCommitment,
    SettlementOutcome,
)


def _validate_odds(v: str) -> str:
    odds_math.parse_american(v)
    return v


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------

class PreferencesRecord(BaseModel):
    counting_style: CountingStyle = CountingStyle.INCLUSIVE
    goal_unit: GoalUnit = GoalUnit.PAGES
    front_matter_pages: int = Field(10, ge=0)
    back_matter_pages: int = Field(20, ge=0)
    custom_start_page: Optional[int] = Field(None, ge=1)
    custom_end_page: Optional[int] = Field(None, ge=1)
    front_matter_chapters: int = Field(1, ge=0)
    back_matter_chapters: int = Field(1, ge=0)
    custom_start_chapter: Optional[int] = Field(None, ge=1)
    custom_end_chapter: Optional[int] = Field(None, ge=1)

    @classmethod
    def from_domain(cls, prefs: ReadingPreferences) -> "PreferencesRecord":
        return cls(**asdict(prefs))

    def to_domain(self) -> ReadingPreferences:
        return ReadingPreferences(**self.model_dump())


class BookRecord(BaseModel):
    id: str = Field(..., min_length=1)
    title: str
    total_pages: int = Field(..., ge=1)
    author: Optional[str] = None
    total_chapters: Optional[int] = Field(None, ge=1)
    difficulty: Difficulty = Difficulty.MEDIUM
    preferences: Optional[PreferencesRecord] = None

    @classmethod
    def from_domain(cls, book: Book) -> "BookRecord":
        return cls(
            id=book.id,
            title=book.title,
            total_pages=book.total_pages,
            author=book.author,
            total_chapters=book.total_chapters,
            difficulty=book.difficulty,
            preferences=PreferencesRecord.from_domain(book.preferences) if book.preferences else None,
        )

    def to_domain(self) -> Book:
        return Book(
            id=self.id,
            title=self.title,
            total_pages=self.total_pages,
            author=self.author,
            total_chapters=self.total_chapters,
            difficulty=self.difficulty,
            preferences=self.preferences.to_domain() if self.preferences else None,
        )


# ---------------------------------------------------------------------------
# Commitments
# ---------------------------------------------------------------------------

class DayClockRecord(BaseModel):
    """``mode="scheduled"`` follows the calendar; ``"advanced"`` pins ``day``."""

    mode: Literal["scheduled", "advanced"]
    start: datetime
    day: Optional[int] = Field(None, ge=1)

    @classmethod
    def from_domain(cls, clock: DayClock) -> "DayClockRecord":
        if isinstance(clock, Advanced):
            return cls(mode="advanced", start=clock.start, day=clock.day)
        return cls(mode="scheduled", start=clock.start)

    def to_domain(self) -> DayClock:
        if self.mode == "advanced":
            if self.day is None:
                raise ValueError("advanced day clock requires a day")
            return Advanced(start=self.start, day=self.day)
        return Scheduled(start=self.start)


class ReadingCommitmentRecord(BaseModel):
    kind: Literal["reading"] = "reading"
    id: uuid.UUID
    book: BookRecord
    timeframe: str
    total_days: int = Field(..., gt=0)
    odds: str = Field(..., description='American odds, e.g. "+180"')
    wager: float = Field(..., gt=0)
    daily_target: int = Field(..., gt=0)
    unit: GoalUnit = GoalUnit.PAGES
    clock: DayClockRecord

    @field_validator("odds")
    @classmethod
    def validate_american_odds(cls, v: str) -> str:
        return _validate_odds(v)

    @classmethod
    def from_domain(cls, c: ReadingCommitment) -> "ReadingCommitmentRecord":
        return cls(
            id=c.id,
            book=BookRecord.from_domain(c.book),
            timeframe=c.timeframe,
            total_days=c.total_days,
            odds=c.odds,
            wager=c.wager,
            daily_target=c.daily_target,
            unit=c.unit,
            clock=DayClockRecord.from_domain(c.clock),
        )

    def to_domain(self) -> ReadingCommitment:
        return ReadingCommitment(
            id=self.id,
            book=self.book.to_domain(),
            timeframe=self.timeframe,
            total_days=self.total_days,
            odds=self.odds,
            wager=self.wager,
            daily_target=self.daily_target,
            unit=self.unit,
            clock=self.clock.to_domain(),
        )


class EngagementGoalRecord(BaseModel):
    id: uuid.UUID
    kind: EngagementType
    target_count: int = Field(..., ge=1)
    current_count: int = Field(0, ge=0)
    entries: List[str] = Field(default_factory=list)


class EngagementCommitmentRecord(BaseModel):
    kind: Literal["engagement"] = "engagement"
    id: uuid.UUID
    book: BookRecord
    goals: List[EngagementGoalRecord] = Field(..., min_length=1)
    odds: str
    wager: float = Field(..., gt=0)
    created_at: datetime

    @field_validator("odds")
    @classmethod
    def validate_american_odds(cls, v: str) -> str:
        return _validate_odds(v)

    @classmethod
    def from_domain(cls, c: EngagementCommitment) -> "EngagementCommitmentRecord":
        return cls(
            id=c.id,
            book=BookRecord.from_domain(c.book),
            goals=[
                EngagementGoalRecord(
                    id=g.id,
                    kind=g.kind,
                    target_count=g.target_count,
                    current_count=g.current_count,
                    entries=list(g.entries),
                )
                for g in c.goals
            ],
            odds=c.odds,
            wager=c.wager,
            created_at=c.created_at,
        )

    def to_domain(self) -> EngagementCommitment:
        return EngagementCommitment(
            id=self.id,
            book=self.book.to_domain(),
            goals=tuple(
                EngagementGoal(
                    id=g.id,
                    kind=g.kind,
                    target_count=g.target_count,
                    current_count=g.current_count,
                    entries=tuple(g.entries),
                )
                for g in self.goals
            ),
            odds=self.odds,
            wager=self.wager,
            created_at=self.created_at,
        )


CommitmentRecord = Annotated[
    Union[ReadingCommitmentRecord, EngagementCommitmentRecord],
    Field(discriminator="kind"),
]


def commitment_record(c) -> Union[ReadingCommitmentRecord, EngagementCommitmentRecord]:
    if isinstance(c, ReadingCommitment):
        return ReadingCommitmentRecord.from_domain(c)
    return EngagementCommitmentRecord.from_domain(c)


# ---------------------------------------------------------------------------
# Progress, settlement, parlays
# ---------------------------------------------------------------------------

class ProgressRecordSchema(BaseModel):
    commitment_id: uuid.UUID
    cumulative_units: int = Field(..., ge=0)
    last_position: int = Field(..., ge=0)
    day_units: int = Field(0, ge=0)
    sessions: int = Field(0, ge=0)
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, p: ProgressRecord) -> "ProgressRecordSchema":
        return cls(**asdict(p))

    def to_domain(self) -> ProgressRecord:
        return ProgressRecord(**self.model_dump())


class SettledCommitmentRecord(BaseModel):
    commitment: CommitmentRecord
    settled_at: datetime
    units_consumed: int = Field(..., ge=0)
    outcome: SettlementOutcome
    payout: float = Field(..., ge=0)
    reason: Optional[str] = Field(None, max_length=200)

    @classmethod
    def from_domain(cls, s: SettledCommitment) -> "SettledCommitmentRecord":
        return cls(
            commitment=commitment_record(s.commitment),
            settled_at=s.settled_at,
            units_consumed=s.units_consumed,
            outcome=s.outcome,
            payout=s.payout,
            reason=s.reason,
        )

    def to_domain(self) -> SettledCommitment:
        return SettledCommitment(
            commitment=self.commitment.to_domain(),
            settled_at=self.settled_at,
            units_consumed=self.units_consumed,
            outcome=self.outcome,
            payout=self.payout,
            reason=self.reason,
        )


class ParlayTicketRecord(BaseModel):
    id: uuid.UUID
    leg_ids: List[uuid.UUID] = Field(..., min_length=2)
    combined_odds: str
    wager: float = Field(..., gt=0)
    placed_at: datetime

    @field_validator("combined_odds")
    @classmethod
    def validate_american_odds(cls, v: str) -> str:
        return _validate_odds(v)

    @classmethod
    def from_domain(cls, t: ParlayTicket) -> "ParlayTicketRecord":
        return cls(
            id=t.id,
            leg_ids=list(t.leg_ids),
            combined_odds=t.combined_odds,
            wager=t.wager,
            placed_at=t.placed_at,
        )

    def to_domain(self) -> ParlayTicket:
        return ParlayTicket(
            id=self.id,
            leg_ids=tuple(self.leg_ids),
            combined_odds=self.combined_odds,
            wager=self.wager,
            placed_at=self.placed_at,
        )


# ---------------------------------------------------------------------------
# Whole-ledger snapshot
# ---------------------------------------------------------------------------

class LedgerSnapshot(BaseModel):
    """Everything a ledger needs to be rebuilt with ``ProgressLedger.restore``."""

    reading: List[ReadingCommitmentRecord] = Field(default_factory=list)
    engagement: List[EngagementCommitmentRecord] = Field(default_factory=list)
    progress: List[ProgressRecordSchema] = Field(default_factory=list)
    settled: List[SettledCommitmentRecord] = Field(default_factory=list)
    parlays: List[ParlayTicketRecord] = Field(default_factory=list)
    balance: Optional[float] = None

    @classmethod
    def build(cls, *, reading, engagement, progress, settled, parlays, balance) -> "LedgerSnapshot":
        return cls(
            reading=[ReadingCommitmentRecord.from_domain(c) for c in reading],
            engagement=[EngagementCommitmentRecord.from_domain(c) for c in engagement],
            progress=[ProgressRecordSchema.from_domain(p) for p in progress],
            settled=[SettledCommitmentRecord.from_domain(s) for s in settled],
            parlays=[ParlayTicketRecord.from_domain(t) for t in parlays],
            balance=balance,
        )

    def reading_commitments(self) -> Tuple[ReadingCommitment, ...]:
        return tuple(r.to_domain() for r in self.reading)

    def engagement_commitments(self) -> Tuple[EngagementCommitment, ...]:
        return tuple(r.to_domain() for r in self.engagement)

    def progress_records(self) -> Tuple[ProgressRecord, ...]:
        return tuple(r.to_domain() for r in self.progress)

    def settled_commitments(self) -> Tuple[SettledCommitment, ...]:
        return tuple(r.to_domain() for r in self.settled)

    def parlay_tickets(self) -> Tuple[ParlayTicket, ...]:
        return tuple(r.to_domain() for r in self.parlays)
