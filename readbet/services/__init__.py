"""Stateful orchestration: the draft slip, the progress ledger and the
read-only views built on top of it."""
