"""Derived metrics over the store's collections.

Everything here is recomputed on demand from the collections passed in.
Time-relative helpers take an explicit ``as_of`` date instead of reading the
clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable

from ..models.asset import Asset, AssetType
from ..models.goal import Goal
from ..models.transaction import Transaction, TransactionType


@dataclass(frozen=True, slots=True)
class MonthlySummary:
    month: str
    income: float
    expenses: float

    @property
    def net(self) -> float:
        return self.income - self.expenses


@dataclass(frozen=True, slots=True)
class AssetReturn:
    """Return figures for one asset; ``percentage_return`` is ``None`` when nothing was invested."""

    invested: float
    current_value: float
    absolute_return: float
    percentage_return: float | None


@dataclass(frozen=True, slots=True)
class PortfolioReturn:
    invested: float
    current_value: float
    absolute: float
    percentage: float


class GoalStatus(str, Enum):
    COMPLETED = "completed"
    OVERDUE = "overdue"
    URGENT = "urgent"
    ACTIVE = "active"


URGENT_WINDOW_DAYS = 30


def month_key(as_of: date) -> str:
    """``YYYY-MM`` prefix used to match transaction dates."""
    return as_of.strftime("%Y-%m")


def _sum(transactions: Iterable[Transaction], txn_type: TransactionType, month: str | None = None) -> float:
    return sum(
        t.amount
        for t in transactions
        if t.type is txn_type and (month is None or t.in_month(month))
    )


def total_balance(transactions: Iterable[Transaction]) -> float:
    """All-time income minus all-time expenses."""
    txns = list(transactions)
    return _sum(txns, TransactionType.INCOME) - _sum(txns, TransactionType.EXPENSE)


def monthly_income(transactions: Iterable[Transaction], *, as_of: date) -> float:
    return _sum(transactions, TransactionType.INCOME, month_key(as_of))


def monthly_expenses(transactions: Iterable[Transaction], *, as_of: date) -> float:
    return _sum(transactions, TransactionType.EXPENSE, month_key(as_of))


def monthly_summary(transactions: Iterable[Transaction], *, as_of: date) -> MonthlySummary:
    txns = list(transactions)
    return MonthlySummary(
        month=month_key(as_of),
        income=monthly_income(txns, as_of=as_of),
        expenses=monthly_expenses(txns, as_of=as_of),
    )


def _shift_month(value: date, months: int) -> date:
    index = value.year * 12 + value.month - 1 + months
    return date(index // 12, index % 12 + 1, 1)


def monthly_history(
    transactions: Iterable[Transaction], *, as_of: date, months: int = 6
) -> list[MonthlySummary]:
    """Income/expense totals for the ``months`` calendar months ending at ``as_of``, oldest first."""

    txns = list(transactions)
    return [
        monthly_summary(txns, as_of=_shift_month(as_of, -offset))
        for offset in range(max(months, 0) - 1, -1, -1)
    ]


def expenses_by_category(
    transactions: Iterable[Transaction], *, as_of: date | None = None
) -> list[tuple[str, float]]:
    """Expense totals per category, largest first.

    Restricted to the month of ``as_of`` when given, otherwise all-time.
    """

    month = month_key(as_of) if as_of is not None else None
    totals: dict[str, float] = {}
    for txn in transactions:
        if txn.type is not TransactionType.EXPENSE:
            continue
        if month is not None and not txn.in_month(month):
            continue
        totals[txn.category] = totals.get(txn.category, 0.0) + txn.amount
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


def transactions_by_type(transactions: Iterable[Transaction], kind: str = "all") -> list[Transaction]:
    """Transactions of ``kind`` (``all``, ``income`` or ``expense``), newest date first."""

    if kind not in {"all", "income", "expense"}:
        raise ValueError(f"Unknown transaction filter: {kind}")
    selected = [t for t in transactions if kind == "all" or t.type.value == kind]
    return sorted(selected, key=lambda t: t.date, reverse=True)


def top_categories(breakdown: Iterable[tuple[str, float]], limit: int = 5) -> list[tuple[str, float]]:
    return list(breakdown)[: max(0, limit)]


def assets_value(assets: Iterable[Asset]) -> float:
    return sum(a.current_value for a in assets)


def assets_invested(assets: Iterable[Asset]) -> float:
    return sum(a.invested for a in assets)


def asset_return(asset: Asset) -> AssetReturn:
    invested = asset.invested
    current = asset.current_value
    absolute = current - invested
    percentage = (absolute / invested) * 100 if invested != 0 else None
    return AssetReturn(
        invested=invested,
        current_value=current,
        absolute_return=absolute,
        percentage_return=percentage,
    )


def portfolio_return(assets: Iterable[Asset]) -> PortfolioReturn:
    holdings = list(assets)
    invested = assets_invested(holdings)
    current = assets_value(holdings)
    absolute = current - invested
    return PortfolioReturn(
        invested=invested,
        current_value=current,
        absolute=absolute,
        percentage=(absolute / invested) * 100 if invested > 0 else 0.0,
    )


def asset_ranking(assets: Iterable[Asset]) -> list[tuple[Asset, AssetReturn]]:
    """Assets by percentage return, best first; assets with no percentage rank last."""

    ranked = [(asset, asset_return(asset)) for asset in assets]
    ranked.sort(
        key=lambda pair: (pair[1].percentage_return is not None, pair[1].percentage_return or 0.0),
        reverse=True,
    )
    return ranked


def portfolio_distribution(assets: Iterable[Asset]) -> dict[AssetType, float]:
    """Current value per asset type, unrounded, in first-seen order."""

    distribution: dict[AssetType, float] = {}
    for asset in assets:
        distribution[asset.type] = distribution.get(asset.type, 0.0) + asset.current_value
    return distribution


def goal_progress(goal: Goal) -> float:
    """Percent of the target reached; may exceed 100."""
    if goal.target_amount <= 0:
        return 0.0
    return goal.current_amount / goal.target_amount * 100


def days_left(goal: Goal, *, as_of: date) -> int:
    return (date.fromisoformat(goal.deadline) - as_of).days


def goal_status(goal: Goal, *, as_of: date) -> GoalStatus:
    """Classify a goal; a reached target is completed whatever the deadline."""

    if goal_progress(goal) >= 100:
        return GoalStatus.COMPLETED
    remaining_days = days_left(goal, as_of=as_of)
    if remaining_days < 0:
        return GoalStatus.OVERDUE
    if remaining_days <= URGENT_WINDOW_DAYS:
        return GoalStatus.URGENT
    return GoalStatus.ACTIVE


def completed_goals(goals: Iterable[Goal]) -> list[Goal]:
    return [g for g in goals if goal_progress(g) >= 100]


def goals_target_total(goals: Iterable[Goal]) -> float:
    return sum(g.target_amount for g in goals)


def overall_goal_progress(goals: Iterable[Goal]) -> float:
    """Combined progress of every goal: total saved over total target, in percent."""

    items = list(goals)
    target = goals_target_total(items)
    if target == 0:
        return 0.0
    return sum(g.current_amount for g in items) / target * 100


__all__ = [
    "MonthlySummary",
    "AssetReturn",
    "PortfolioReturn",
    "GoalStatus",
    "month_key",
    "total_balance",
    "monthly_income",
    "monthly_expenses",
    "monthly_summary",
    "monthly_history",
    "transactions_by_type",
    "expenses_by_category",
    "top_categories",
    "assets_value",
    "assets_invested",
    "asset_return",
    "portfolio_return",
    "asset_ranking",
    "portfolio_distribution",
    "goal_progress",
    "days_left",
    "goal_status",
    "completed_goals",
    "goals_target_total",
    "overall_goal_progress",
]
