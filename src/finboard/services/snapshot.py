"""Encode/decode the persisted store document.

Wire format::

    {"state": {"transactions": [...], "assets": [...], "goals": [...],
               "investments": [...]},
     "version": 0}

Entity keys are camelCase (``isRecurring``, ``installmentValue``,
``purchasePrice``...). Decoding tolerates the optional keys older documents
omit (``paidInstallments``, ``contributions``, ``inflation``, ``isRecurring``).
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from ..errors import PersistenceError
from ..models.asset import Asset, AssetType
from ..models.goal import Contribution, Goal
from ..models.investment import Investment
from ..models.state import FinanceState
from ..models.transaction import InstallmentPlan, Transaction, TransactionType

SNAPSHOT_VERSION = 0


def _encode_transaction(txn: Transaction) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": txn.id,
        "type": txn.type.value,
        "amount": txn.amount,
        "description": txn.description,
        "category": txn.category,
        "date": txn.date,
        "isRecurring": txn.is_recurring,
    }
    if txn.installments is not None:
        plan = txn.installments
        row["installments"] = {
            "total": plan.total,
            "current": plan.current,
            "installmentValue": plan.installment_value,
            "paidInstallments": sorted(plan.paid_installments),
        }
    return row


def _encode_asset(asset: Asset) -> dict[str, Any]:
    return {
        "id": asset.id,
        "name": asset.name,
        "type": asset.type.value,
        "quantity": asset.quantity,
        "purchasePrice": asset.purchase_price,
        "currentPrice": asset.current_price,
        "purchaseDate": asset.purchase_date,
    }


def _encode_goal(goal: Goal) -> dict[str, Any]:
    return {
        "id": goal.id,
        "name": goal.name,
        "targetAmount": goal.target_amount,
        "currentAmount": goal.current_amount,
        "deadline": goal.deadline,
        "monthlyContribution": goal.monthly_contribution,
        "expectedReturn": goal.expected_return,
        "contributions": [
            {"id": c.id, "amount": c.amount, "date": c.date} for c in goal.contributions
        ],
    }


def _encode_investment(investment: Investment) -> dict[str, Any]:
    return {
        "id": investment.id,
        "name": investment.name,
        "initialAmount": investment.initial_amount,
        "monthlyContribution": investment.monthly_contribution,
        "expectedReturn": investment.expected_return,
        "period": investment.period,
        "compoundInterest": investment.compound_interest,
        "inflation": investment.inflation,
    }


def to_document(state: FinanceState) -> dict[str, Any]:
    return {
        "state": {
            "transactions": [_encode_transaction(t) for t in state.transactions],
            "assets": [_encode_asset(a) for a in state.assets],
            "goals": [_encode_goal(g) for g in state.goals],
            "investments": [_encode_investment(i) for i in state.investments],
        },
        "version": SNAPSHOT_VERSION,
    }


def dumps(state: FinanceState) -> str:
    """Serialize ``state``; numbers keep full float precision."""
    return json.dumps(to_document(state), ensure_ascii=False, allow_nan=False)


def _decode_transaction(row: Mapping[str, Any]) -> Transaction:
    raw_plan = row.get("installments")
    plan = None
    if raw_plan:
        plan = InstallmentPlan(
            total=int(raw_plan["total"]),
            current=int(raw_plan.get("current", 1)),
            installment_value=float(raw_plan["installmentValue"]),
            paid_installments=frozenset(int(n) for n in raw_plan.get("paidInstallments") or ()),
        )
    return Transaction(
        id=str(row["id"]),
        type=TransactionType(row["type"]),
        amount=float(row["amount"]),
        description=str(row["description"]),
        category=str(row["category"]),
        date=str(row["date"]),
        is_recurring=bool(row.get("isRecurring", False)),
        installments=plan,
    )


def _decode_asset(row: Mapping[str, Any]) -> Asset:
    return Asset(
        id=str(row["id"]),
        name=str(row["name"]),
        type=AssetType(row["type"]),
        quantity=float(row["quantity"]),
        purchase_price=float(row["purchasePrice"]),
        current_price=float(row["currentPrice"]),
        purchase_date=str(row["purchaseDate"]),
    )


def _decode_goal(row: Mapping[str, Any]) -> Goal:
    contributions = tuple(
        Contribution(id=str(c["id"]), amount=float(c["amount"]), date=str(c["date"]))
        for c in row.get("contributions") or ()
    )
    return Goal(
        id=str(row["id"]),
        name=str(row["name"]),
        target_amount=float(row["targetAmount"]),
        current_amount=float(row["currentAmount"]),
        deadline=str(row["deadline"]),
        monthly_contribution=float(row.get("monthlyContribution", 0.0)),
        expected_return=float(row.get("expectedReturn", 0.0)),
        contributions=contributions,
    )


def _decode_investment(row: Mapping[str, Any]) -> Investment:
    return Investment(
        id=str(row["id"]),
        name=str(row["name"]),
        initial_amount=float(row["initialAmount"]),
        monthly_contribution=float(row["monthlyContribution"]),
        expected_return=float(row["expectedReturn"]),
        period=int(row["period"]),
        compound_interest=bool(row.get("compoundInterest", True)),
        inflation=float(row.get("inflation") or 0.0),
    )


def from_document(document: Mapping[str, Any]) -> FinanceState:
    try:
        state = document["state"]
        return FinanceState(
            transactions=tuple(_decode_transaction(r) for r in state.get("transactions") or ()),
            assets=tuple(_decode_asset(r) for r in state.get("assets") or ()),
            goals=tuple(_decode_goal(r) for r in state.get("goals") or ()),
            investments=tuple(_decode_investment(r) for r in state.get("investments") or ()),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise PersistenceError(f"Malformed store snapshot: {exc!r}") from exc


def loads(raw: str) -> FinanceState:
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PersistenceError(f"Store snapshot is not valid JSON: {exc}") from exc
    if not isinstance(document, Mapping):
        raise PersistenceError("Store snapshot must be a JSON object")
    return from_document(document)


__all__ = ["SNAPSHOT_VERSION", "to_document", "dumps", "from_document", "loads"]
