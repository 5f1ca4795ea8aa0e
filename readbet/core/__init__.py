"""Core mathematics for the ReadBet commitment engine.

This package contains pure building blocks:

- ``odds_math``   — American odds parsing, conversion and parlay combination
- ``odds_policy`` — quoting policies (fine-grained and coarse) and quotes
- ``schedule``    — timeframe parsing, day ranges, day clock, status

Nothing in this package imports from ``readbet.services``.
All modules are side-effect-free and unit-testable in isolation.
"""
