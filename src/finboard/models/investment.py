"""Saved growth-projection scenarios."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .fields import optional_bool, reject_unknown, require_int, require_number, require_text


@dataclass(frozen=True, slots=True)
class Investment:
    """Parameters of a projection the user chose to keep. Not a real holding."""

    id: str
    name: str
    initial_amount: float
    monthly_contribution: float
    expected_return: float
    period: int
    compound_interest: bool = True
    inflation: float = 0.0

    FIELDS = frozenset(
        {
            "name",
            "initial_amount",
            "monthly_contribution",
            "expected_return",
            "period",
            "compound_interest",
            "inflation",
        }
    )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, entity_id: str) -> "Investment":
        reject_unknown(data, cls.FIELDS | {"id"}, "investment")
        return cls(
            id=entity_id,
            name=require_text(data, "name"),
            initial_amount=require_number(data, "initial_amount", default=0.0, minimum=0),
            monthly_contribution=require_number(data, "monthly_contribution", default=0.0, minimum=0),
            expected_return=require_number(data, "expected_return", default=0.0),
            period=require_int(data, "period", minimum=1),
            compound_interest=optional_bool(data, "compound_interest", default=True),
            inflation=require_number(data, "inflation", default=0.0),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "initial_amount": self.initial_amount,
            "monthly_contribution": self.monthly_contribution,
            "expected_return": self.expected_return,
            "period": self.period,
            "compound_interest": self.compound_interest,
            "inflation": self.inflation,
        }
