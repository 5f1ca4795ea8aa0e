"""Wager progress-tracking engine for the ReadBet reading-habit app.

A reader stakes a wager that they will finish a book (or hit journal
engagement goals) inside a timeframe.  This package quotes the odds, splits
the goal into daily page ranges, tracks sessions against that schedule and
settles the commitment.

- ``readbet.core``     — pure odds and scheduling math
- ``readbet.models``   — domain value objects
- ``readbet.schemas``  — serializable records for persistence collaborators
- ``readbet.services`` — the draft slip and the progress ledger
"""

__version__ = "0.3.0"
