"""Immutable container for the four entity collections."""

from __future__ import annotations

from dataclasses import dataclass

from .asset import Asset
from .goal import Goal
from .investment import Investment
from .transaction import Transaction


@dataclass(frozen=True, slots=True)
class FinanceState:
    """Whole-store value; every mutation produces a new instance."""

    transactions: tuple[Transaction, ...] = ()
    assets: tuple[Asset, ...] = ()
    goals: tuple[Goal, ...] = ()
    investments: tuple[Investment, ...] = ()

    def counts(self) -> dict[str, int]:
        return {
            "transactions": len(self.transactions),
            "assets": len(self.assets),
            "goals": len(self.goals),
            "investments": len(self.investments),
        }
