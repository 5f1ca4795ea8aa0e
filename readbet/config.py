"""
Engine configuration loaded from the environment.

Values are read once by :meth:`EngineConfig.from_env`; services take an
explicit ``EngineConfig`` and never read the environment themselves.
Override a single field with :func:`dataclasses.replace`::

    from dataclasses import replace
    cfg = replace(EngineConfig.from_env(), empty_slip_policy="noop")
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final, Optional

from dotenv import load_dotenv

from readbet.core.odds_policy import POLICY_FINE, OddsPolicy

EMPTY_SLIP_RAISE: Final[str] = "raise"
EMPTY_SLIP_NOOP: Final[str] = "noop"
_EMPTY_SLIP_POLICIES = (EMPTY_SLIP_RAISE, EMPTY_SLIP_NOOP)

DEFAULT_WAGER: Final[float] = 10.0


@dataclass(frozen=True)
class EngineConfig:
    """
    Attributes:
        odds_policy: Name of the reading-completion quoting policy
            (``"fine"`` or ``"coarse"``).
        empty_slip_policy: ``"raise"`` makes ``confirm()`` on an empty slip
            raise :class:`~readbet.errors.EmptySlipError`; ``"noop"`` leaves
            everything unchanged and returns no commitments.
        default_wager: Stake assigned to a freshly drafted commitment.
        starting_balance: When set, the ledger tracks a bankroll: confirming
            deducts the slip's wager and winning settlements credit payouts.
    """

    odds_policy: str = POLICY_FINE
    empty_slip_policy: str = EMPTY_SLIP_RAISE
    default_wager: float = DEFAULT_WAGER
    starting_balance: Optional[float] = None

    def __post_init__(self):
        OddsPolicy.from_name(self.odds_policy)
        if self.empty_slip_policy not in _EMPTY_SLIP_POLICIES:
            raise ValueError(
                f"empty_slip_policy must be one of {_EMPTY_SLIP_POLICIES}, "
                f"got {self.empty_slip_policy!r}"
            )
        if self.default_wager <= 0:
            raise ValueError(f"default_wager must be positive, got {self.default_wager!r}")
        if self.starting_balance is not None and self.starting_balance < 0:
            raise ValueError(f"starting_balance cannot be negative, got {self.starting_balance!r}")

    @property
    def policy(self) -> OddsPolicy:
        return OddsPolicy.from_name(self.odds_policy)

    @property
    def tracks_balance(self) -> bool:
        return self.starting_balance is not None

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "EngineConfig":
        """Build a config from ``READBET_*`` variables.

        A ``.env`` file is loaded first (``dotenv_path``, or the nearest one
        found by python-dotenv); variables already set in the process win.
        """
        load_dotenv(dotenv_path)
        balance = os.getenv("READBET_STARTING_BALANCE")
        return cls(
            odds_policy=os.getenv("READBET_ODDS_POLICY", POLICY_FINE).strip().lower(),
            empty_slip_policy=os.getenv("READBET_EMPTY_SLIP_POLICY", EMPTY_SLIP_RAISE).strip().lower(),
            default_wager=float(os.getenv("READBET_DEFAULT_WAGER", str(DEFAULT_WAGER))),
            starting_balance=float(balance) if balance not in (None, "") else None,
        )
