"""Tracked investment holdings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from ..errors import ValidationError
from .fields import reject_unknown, require_date, require_number, require_text


class AssetType(str, Enum):
    """Asset classes; values are the labels used in stored snapshots."""

    FIXED_INCOME = "renda-fixa"
    VARIABLE_INCOME = "renda-variavel"
    CRYPTO = "criptomoeda"
    FUND = "fundo"

    @classmethod
    def parse(cls, raw: Any) -> "AssetType":
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            key = raw.strip().lower()
            for member in cls:
                if key in (member.value, member.name.lower(), member.name.lower().replace("_", "-")):
                    return member
        raise ValidationError(
            "type must be one of " + ", ".join(m.value for m in cls), field="type"
        )


@dataclass(frozen=True, slots=True)
class Asset:
    """A holding with purchase and current price; no price history is kept."""

    id: str
    name: str
    type: AssetType
    quantity: float
    purchase_price: float
    current_price: float
    purchase_date: str

    FIELDS = frozenset(
        {"name", "type", "quantity", "purchase_price", "current_price", "purchase_date"}
    )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, entity_id: str, today: str) -> "Asset":
        reject_unknown(data, cls.FIELDS | {"id"}, "asset")
        return cls(
            id=entity_id,
            name=require_text(data, "name"),
            type=AssetType.parse(data.get("type", AssetType.FIXED_INCOME)),
            quantity=require_number(data, "quantity", minimum=0),
            purchase_price=require_number(data, "purchase_price", positive=True),
            current_price=require_number(data, "current_price", minimum=0),
            purchase_date=require_date(data, "purchase_date", default=today),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "quantity": self.quantity,
            "purchase_price": self.purchase_price,
            "current_price": self.current_price,
            "purchase_date": self.purchase_date,
        }

    @property
    def invested(self) -> float:
        return self.quantity * self.purchase_price

    @property
    def current_value(self) -> float:
        return self.quantity * self.current_price
