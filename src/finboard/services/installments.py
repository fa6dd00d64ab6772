"""Installment-plan schedules and totals."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable

from ..models.transaction import InstallmentPlan, Transaction


class InstallmentStatus(str, Enum):
    COMPLETED = "completed"
    PARTIAL = "partial"
    PENDING = "pending"


@dataclass(frozen=True, slots=True)
class InstallmentDue:
    """One scheduled sub-payment of an installment purchase."""

    number: int
    due_date: date
    value: float
    is_paid: bool
    is_overdue: bool


@dataclass(frozen=True, slots=True)
class InstallmentTotals:
    plans: int
    total_value: float
    paid: float

    @property
    def remaining(self) -> float:
        return self.total_value - self.paid


def add_months(start: date, months: int) -> date:
    """Same day ``months`` later, clamped to the last day of short months."""

    index = start.year * 12 + start.month - 1 + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def installment_status(plan: InstallmentPlan) -> InstallmentStatus:
    if plan.is_settled:
        return InstallmentStatus.COMPLETED
    if plan.paid_count > 0:
        return InstallmentStatus.PARTIAL
    return InstallmentStatus.PENDING


def installment_schedule(transaction: Transaction, *, as_of: date) -> list[InstallmentDue]:
    """Monthly due dates starting at the transaction date.

    An unpaid installment is overdue once its due date is before ``as_of``.
    """

    plan = transaction.installments
    if plan is None:
        return []

    start = date.fromisoformat(transaction.date)
    schedule: list[InstallmentDue] = []
    for number in range(1, plan.total + 1):
        due = add_months(start, number - 1)
        is_paid = number in plan.paid_installments
        schedule.append(
            InstallmentDue(
                number=number,
                due_date=due,
                value=plan.installment_value,
                is_paid=is_paid,
                is_overdue=not is_paid and due < as_of,
            )
        )
    return schedule


def installment_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.installments is not None]


def filter_by_status(
    transactions: Iterable[Transaction], view: str = "active"
) -> list[Transaction]:
    """``active`` hides settled plans, ``completed`` keeps only them, ``all`` keeps everything."""

    if view not in {"active", "completed", "all"}:
        raise ValueError(f"Unknown installment view: {view}")
    plans = installment_transactions(transactions)
    if view == "all":
        return plans
    want_completed = view == "completed"
    return [
        t
        for t in plans
        if (installment_status(t.installments) is InstallmentStatus.COMPLETED) == want_completed
    ]


def installment_totals(transactions: Iterable[Transaction]) -> InstallmentTotals:
    """Full purchase amounts against what has been paid so far."""

    plans = installment_transactions(transactions)
    total_value = sum(t.amount for t in plans)
    paid = sum(t.installments.paid_count * t.installments.installment_value for t in plans)
    return InstallmentTotals(plans=len(plans), total_value=total_value, paid=paid)


__all__ = [
    "InstallmentStatus",
    "InstallmentDue",
    "InstallmentTotals",
    "add_months",
    "installment_status",
    "installment_schedule",
    "installment_transactions",
    "filter_by_status",
    "installment_totals",
]
