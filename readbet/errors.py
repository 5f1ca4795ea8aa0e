"""Exceptions raised by the ledger and slip.

All derive from ``ValueError`` so callers that already guard odds and
timeframe parsing with ``except ValueError`` keep working.
"""


class CommitmentError(ValueError):
    """Base class for rejected commitment operations."""


class CommitmentStateError(CommitmentError):
    """The commitment is not in the state the operation requires."""


class EmptySlipError(CommitmentError):
    """``confirm()`` was called on a slip with no drafts."""


class InsufficientBalanceError(CommitmentError):
    """The slip's total wager exceeds the tracked balance."""
