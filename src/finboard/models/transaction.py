"""Ledger transactions and installment plans."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping

from ..errors import ValidationError
from .fields import (
    optional_bool,
    reject_unknown,
    require_date,
    require_int,
    require_number,
    require_text,
)


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True, slots=True)
class InstallmentPlan:
    """A purchase paid over ``total`` scheduled sub-payments.

    ``paid_installments`` holds 1-based installment numbers and may be toggled
    in any order.
    """

    total: int
    current: int = 1
    installment_value: float = 0.0
    paid_installments: frozenset[int] = field(default_factory=frozenset)

    FIELDS = frozenset({"total", "current", "installment_value", "paid_installments"})

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, amount: float) -> "InstallmentPlan":
        """Build a plan; ``installment_value`` defaults to ``amount / total``."""

        reject_unknown(data, cls.FIELDS, "installment")
        total = require_int(data, "total", minimum=1)
        current = require_int(data, "current", default=1, minimum=1)
        value = require_number(data, "installment_value", default=amount / total, minimum=0)

        raw_paid = data.get("paid_installments") or ()
        if isinstance(raw_paid, (str, bytes)) or not hasattr(raw_paid, "__iter__"):
            raise ValidationError("paid_installments must be a list of numbers", field="paid_installments")
        paid: set[int] = set()
        for number in raw_paid:
            if isinstance(number, bool) or not isinstance(number, int):
                raise ValidationError("paid_installments must be whole numbers", field="paid_installments")
            if not 1 <= number <= total:
                raise ValidationError(
                    f"installment {number} is outside 1..{total}", field="paid_installments"
                )
            paid.add(number)
        return cls(total=total, current=current, installment_value=value, paid_installments=frozenset(paid))

    @property
    def paid_count(self) -> int:
        return len(self.paid_installments)

    @property
    def is_settled(self) -> bool:
        return self.paid_count == self.total

    def _check_number(self, number: int) -> None:
        if isinstance(number, bool) or not isinstance(number, int) or not 1 <= number <= self.total:
            raise ValidationError(f"installment number must be within 1..{self.total}", field="number")

    def with_paid(self, number: int) -> "InstallmentPlan":
        self._check_number(number)
        return replace(self, paid_installments=self.paid_installments | {number})

    def without_paid(self, number: int) -> "InstallmentPlan":
        self._check_number(number)
        return replace(self, paid_installments=self.paid_installments - {number})

    def settled(self) -> "InstallmentPlan":
        return replace(self, paid_installments=frozenset(range(1, self.total + 1)))


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single income or expense event.

    ``amount`` is always positive; ``type`` carries the direction. For
    installment purchases it is the full purchase amount, not the per-installment value.
    """

    id: str
    type: TransactionType
    amount: float
    description: str
    category: str
    date: str
    is_recurring: bool = False
    installments: InstallmentPlan | None = None

    FIELDS = frozenset(
        {"type", "amount", "description", "category", "date", "is_recurring", "installments"}
    )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, entity_id: str, today: str) -> "Transaction":
        reject_unknown(data, cls.FIELDS | {"id"}, "transaction")
        try:
            txn_type = TransactionType(data.get("type"))
        except ValueError as exc:
            raise ValidationError("type must be 'income' or 'expense'", field="type") from exc

        amount = require_number(data, "amount", positive=True)
        raw_plan = data.get("installments")
        if raw_plan is None:
            plan = None
        elif isinstance(raw_plan, InstallmentPlan):
            plan = raw_plan
        elif isinstance(raw_plan, Mapping):
            plan = InstallmentPlan.from_mapping(raw_plan, amount=amount)
        else:
            raise ValidationError("installments must be a mapping", field="installments")

        return cls(
            id=entity_id,
            type=txn_type,
            amount=amount,
            description=require_text(data, "description"),
            category=require_text(data, "category"),
            date=require_date(data, "date", default=today),
            is_recurring=optional_bool(data, "is_recurring"),
            installments=plan,
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "amount": self.amount,
            "description": self.description,
            "category": self.category,
            "date": self.date,
            "is_recurring": self.is_recurring,
            "installments": self.installments,
        }

    def in_month(self, month_prefix: str) -> bool:
        return self.date.startswith(month_prefix)
