"""Savings goals and their contribution log."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

from .fields import reject_unknown, require_date, require_number, require_text


@dataclass(frozen=True, slots=True)
class Contribution:
    """One deposit towards a goal; ``date`` is a full ISO timestamp."""

    id: str
    amount: float
    date: str


@dataclass(frozen=True, slots=True)
class Goal:
    """A savings target with a deadline.

    ``current_amount`` minus its value at creation equals the sum of
    ``contributions`` as long as nobody edits ``current_amount`` directly.
    """

    id: str
    name: str
    target_amount: float
    current_amount: float
    deadline: str
    monthly_contribution: float
    expected_return: float
    contributions: tuple[Contribution, ...] = ()

    FIELDS = frozenset(
        {
            "name",
            "target_amount",
            "current_amount",
            "deadline",
            "monthly_contribution",
            "expected_return",
        }
    )

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        entity_id: str,
        contributions: tuple[Contribution, ...] = (),
    ) -> "Goal":
        reject_unknown(data, cls.FIELDS | {"id"}, "goal")
        return cls(
            id=entity_id,
            name=require_text(data, "name"),
            target_amount=require_number(data, "target_amount", positive=True),
            current_amount=require_number(data, "current_amount", default=0.0, minimum=0),
            deadline=require_date(data, "deadline"),
            monthly_contribution=require_number(data, "monthly_contribution", default=0.0, minimum=0),
            expected_return=require_number(data, "expected_return", default=0.0),
            contributions=contributions,
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "target_amount": self.target_amount,
            "current_amount": self.current_amount,
            "deadline": self.deadline,
            "monthly_contribution": self.monthly_contribution,
            "expected_return": self.expected_return,
        }

    def with_contribution(self, contribution: Contribution) -> "Goal":
        """Append ``contribution`` and raise ``current_amount`` in one step."""
        return replace(
            self,
            current_amount=self.current_amount + contribution.amount,
            contributions=self.contributions + (contribution,),
        )

    @property
    def contributed_total(self) -> float:
        return sum(c.amount for c in self.contributions)
