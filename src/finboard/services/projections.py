"""Growth projections, goal payment plans and the cash-vs-installment comparator.

All functions are pure float arithmetic: identical inputs give identical
output, no clock reads, no I/O. Monthly rates are ``annual_pct / 100 / 12``
(simple division, not a geometric conversion).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Literal

from ..errors import ValidationError
from ..models.investment import Investment


@dataclass(frozen=True, slots=True)
class ProjectionPoint:
    """Projected balance at the end of ``month`` (month 0 is the initial amount)."""

    month: int
    nominal: float
    real: float


@dataclass(frozen=True, slots=True)
class ProjectionSummary:
    final_nominal: float
    final_real: float
    total_contributed: float
    total_return: float
    return_percentage: float | None


@dataclass(frozen=True, slots=True)
class CashPayment:
    total_paid: float
    discount: float
    final_amount: float


@dataclass(frozen=True, slots=True)
class InstallmentPayment:
    total_paid: float
    total_interest: float
    monthly_payment: float


@dataclass(frozen=True, slots=True)
class InvestmentOutcome:
    total_invested: float
    total_return: float
    final_amount: float
    monthly_earnings: float


@dataclass(frozen=True, slots=True)
class PaymentComparison:
    cash: CashPayment
    installment: InstallmentPayment
    investment: InvestmentOutcome
    recommendation: Literal["cash", "installment"]
    savings: float


@dataclass(frozen=True, slots=True)
class ComparisonPoint:
    month: int
    investment_value: float
    installments_paid: float


def monthly_rate(annual_pct: float) -> float:
    """Convert an annual percentage into the simple monthly rate."""
    return annual_pct / 100 / 12


def _finite(name: str, value: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite number", field=name)
    return float(value)


def _whole(name: str, value: int, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ValidationError(f"{name} must be a whole number >= {minimum}", field=name)
    return value


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _bounded(name: str, value: float) -> float:
    """Reject results that overflowed to infinity or became NaN."""
    if not math.isfinite(value):
        raise ValidationError(f"{name} is too large to compute", field=name)
    return value


def _growth_factor(name: str, rate: float, periods: int) -> float:
    try:
        factor = (1 + rate) ** periods
    except OverflowError as exc:
        raise ValidationError(f"{name} is too large to compute", field=name) from exc
    return _bounded(name, factor)


def project_growth(
    *,
    initial: float,
    monthly_contribution: float,
    period_months: int,
    annual_return_pct: float,
    compound: bool,
    annual_inflation_pct: float = 0.0,
) -> list[ProjectionPoint]:
    """Return the month-by-month trajectory for months ``0..period_months``.

    Compound mode adds the contribution and then grows the whole balance:
    ``v = (v + c) * (1 + r)``. Simple mode only ever earns interest on the
    original principal: ``v = v + c + initial * r``.
    """

    initial = _finite("initial", initial)
    monthly_contribution = _finite("monthly_contribution", monthly_contribution)
    period_months = _whole("period_months", period_months, 0)
    rate = monthly_rate(_finite("annual_return_pct", annual_return_pct))
    inflation_rate = monthly_rate(_finite("annual_inflation_pct", annual_inflation_pct))

    points: list[ProjectionPoint] = []
    value = initial
    for month in range(period_months + 1):
        if month > 0:
            if compound:
                value = (value + monthly_contribution) * (1 + rate)
            else:
                value = value + monthly_contribution + initial * rate
            value = _bounded("annual_return_pct", value)
        deflator = _growth_factor("annual_inflation_pct", inflation_rate, month)
        if deflator == 0:
            raise ValidationError("annual_inflation_pct must be above -1200", field="annual_inflation_pct")
        real = _bounded("annual_inflation_pct", value / deflator)
        points.append(ProjectionPoint(month=month, nominal=value, real=real))
    return points


def summarize_projection(
    points: list[ProjectionPoint], *, initial: float, monthly_contribution: float
) -> ProjectionSummary:
    """Totals shown next to a projection; percentage is ``None`` when nothing was contributed."""

    if not points:
        raise ValidationError("projection has no points", field="points")
    final = points[-1]
    contributed = _bounded("monthly_contribution", initial + monthly_contribution * final.month)
    total_return = _bounded("initial", final.nominal - contributed)
    percentage = (total_return / contributed) * 100 if contributed != 0 else None
    return ProjectionSummary(
        final_nominal=final.nominal,
        final_real=final.real,
        total_contributed=contributed,
        total_return=total_return,
        return_percentage=percentage,
    )


def project_investment(investment: Investment) -> list[ProjectionPoint]:
    """Run :func:`project_growth` for a saved scenario."""
    return project_growth(
        initial=investment.initial_amount,
        monthly_contribution=investment.monthly_contribution,
        period_months=investment.period,
        annual_return_pct=investment.expected_return,
        compound=investment.compound_interest,
        annual_inflation_pct=investment.inflation,
    )


def months_until(deadline: date, as_of: date) -> int:
    """Whole 30-day months until ``deadline``, rounded half up, at least 1."""
    days = (deadline - as_of).days
    return max(1, _round_half_up(days / 30))


def required_monthly_contribution(
    *,
    target: float,
    current: float,
    deadline: date,
    annual_return_pct: float,
    as_of: date,
) -> float:
    """Monthly deposit that grows ``current`` into ``target`` by ``deadline``.

    Solves the ordinary annuity ``remaining = p * ((1 + r)^n - 1) / r``
    for ``p``; falls back to a straight split when the rate is zero. Never
    negative: an already reached target needs no deposit.
    """

    remaining = _finite("target", target) - _finite("current", current)
    rate = monthly_rate(_finite("annual_return_pct", annual_return_pct))
    months = months_until(deadline, as_of)

    if rate == 0:
        payment = remaining / months
    else:
        growth = _growth_factor("annual_return_pct", rate, months) - 1
        if growth == 0:
            payment = remaining / months
        else:
            payment = remaining / (growth / rate)
    return max(0.0, _bounded("target", payment))


def compare_cash_vs_installments(
    *,
    full_price: float,
    cash_discount_pct: float,
    installment_value: float,
    installment_count: int,
    annual_investment_return_pct: float,
) -> PaymentComparison:
    """Compare paying cash (and investing the would-be installments) with paying in installments.

    The cash-discounted amount is grown month by month; each month except the
    last also receives one installment's worth as a fresh deposit. Cash wins
    when that grown total beats the plain sum of installments.
    """

    full_price = _finite("full_price", full_price)
    discount_pct = _finite("cash_discount_pct", cash_discount_pct)
    installment_value = _finite("installment_value", installment_value)
    installment_count = _whole("installment_count", installment_count, 1)
    rate = monthly_rate(_finite("annual_investment_return_pct", annual_investment_return_pct))

    discount = full_price * discount_pct / 100
    cash_amount = full_price - discount
    installment_total = installment_value * installment_count

    balance = cash_amount
    for month in range(1, installment_count + 1):
        balance = _bounded("annual_investment_return_pct", balance * (1 + rate))
        if month < installment_count:
            balance += installment_value

    deposits = _bounded("installment_value", cash_amount + installment_value * (installment_count - 1))
    investment_return = _bounded("annual_investment_return_pct", balance - deposits)
    recommendation: Literal["cash", "installment"] = (
        "cash" if balance > installment_total else "installment"
    )

    return PaymentComparison(
        cash=CashPayment(total_paid=cash_amount, discount=discount, final_amount=cash_amount),
        installment=InstallmentPayment(
            total_paid=installment_total,
            total_interest=installment_total - full_price,
            monthly_payment=installment_value,
        ),
        investment=InvestmentOutcome(
            total_invested=deposits,
            total_return=investment_return,
            final_amount=balance,
            monthly_earnings=investment_return / installment_count,
        ),
        recommendation=recommendation,
        savings=abs(installment_total - balance),
    )


def comparison_timeline(
    *,
    cash_amount: float,
    installment_value: float,
    installment_count: int,
    annual_investment_return_pct: float,
) -> list[ComparisonPoint]:
    """Month-by-month investment balance next to the cumulative installments paid."""

    balance = _finite("cash_amount", cash_amount)
    installment_value = _finite("installment_value", installment_value)
    installment_count = _whole("installment_count", installment_count, 1)
    rate = monthly_rate(_finite("annual_investment_return_pct", annual_investment_return_pct))

    paid = 0.0
    points = [ComparisonPoint(month=0, investment_value=balance, installments_paid=paid)]
    for month in range(1, installment_count + 1):
        balance = _bounded("annual_investment_return_pct", balance * (1 + rate))
        if month < installment_count:
            balance += installment_value
        paid += installment_value
        points.append(ComparisonPoint(month=month, investment_value=balance, installments_paid=paid))
    return points


__all__ = [
    "ProjectionPoint",
    "ProjectionSummary",
    "PaymentComparison",
    "ComparisonPoint",
    "monthly_rate",
    "project_growth",
    "summarize_projection",
    "project_investment",
    "months_until",
    "required_monthly_contribution",
    "compare_cash_vs_installments",
    "comparison_timeline",
]
