"""Domain entities and the snapshot table."""

from .asset import Asset, AssetType
from .goal import Contribution, Goal
from .investment import Investment
from .snapshot import StoreSnapshot
from .state import FinanceState
from .transaction import InstallmentPlan, Transaction, TransactionType

__all__ = [
    "Asset",
    "AssetType",
    "Contribution",
    "FinanceState",
    "Goal",
    "InstallmentPlan",
    "Investment",
    "StoreSnapshot",
    "Transaction",
    "TransactionType",
]
