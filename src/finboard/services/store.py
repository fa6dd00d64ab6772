"""The finance store: single owner and writer of all entity collections.

Mutations build a new :class:`FinanceState` from the current one, write the
whole snapshot through the injected storage and only then swap the new state
in. A failed write therefore raises :class:`PersistenceError` and leaves the
store exactly as it was.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, TypeVar

from ..config import BaseConfig, MissingIdPolicy
from ..domain.repositories.snapshot import SnapshotStorage
from ..errors import NotFoundError, PersistenceError, ValidationError
from ..logging_config import get_logger
from ..models.asset import Asset
from ..models.goal import Contribution, Goal
from ..models.investment import Investment
from ..models.state import FinanceState
from ..models.transaction import Transaction, TransactionType
from . import aggregation, installments, projections, snapshot

logger = get_logger("store")

T = TypeVar("T", Transaction, Asset, Goal, Investment)

INSTALLMENT_CATEGORY = "Parcelamento"


def _new_id() -> str:
    return uuid.uuid4().hex


class FinanceStore:
    """Holds transactions, assets, goals and saved projection scenarios."""

    def __init__(
        self,
        storage: Optional[SnapshotStorage] = None,
        *,
        key: str = BaseConfig.DEFAULT_STORAGE_KEY,
        state: FinanceState | None = None,
        missing_id_policy: MissingIdPolicy = MissingIdPolicy.RAISE,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._storage = storage
        self._key = key
        self._state = state or FinanceState()
        self.missing_id_policy = missing_id_policy
        self._clock = clock
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        storage: SnapshotStorage,
        *,
        key: str = BaseConfig.DEFAULT_STORAGE_KEY,
        default_state: FinanceState | None = None,
        **kwargs: Any,
    ) -> "FinanceStore":
        """Build a store from the snapshot under ``key``.

        ``default_state`` is used (and immediately persisted) when nothing is
        stored yet.
        """

        try:
            raw = storage.read(key)
        except OSError as exc:
            raise PersistenceError(f"Could not read snapshot '{key}': {exc}") from exc
        if raw is None:
            store = cls(storage, key=key, **kwargs)
            if default_state is not None:
                store.reset(default_state)
            logger.info("No snapshot found, starting fresh", extra={"key": key})
            return store

        state = snapshot.loads(raw)
        logger.info("Snapshot loaded", extra={"key": key, **state.counts()})
        return cls(storage, key=key, state=state, **kwargs)

    def close(self) -> None:
        """Write a final snapshot."""
        self._persist(self._state)
        logger.info("Store closed", extra={"key": self._key})

    def reset(self, state: FinanceState | None = None) -> None:
        """Replace every collection at once (demo seeding, restores)."""
        self._commit(state or FinanceState(), "reset")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @property
    def state(self) -> FinanceState:
        return self._state

    def today(self) -> date:
        return self._clock().date()

    def _persist(self, state: FinanceState) -> None:
        if self._storage is None:
            return
        try:
            payload = snapshot.dumps(state)
        except ValueError as exc:
            raise PersistenceError(f"Store state is not serializable: {exc}") from exc
        try:
            self._storage.write(self._key, payload)
        except OSError as exc:
            raise PersistenceError(f"Could not write snapshot '{self._key}': {exc}") from exc

    def _commit(self, new_state: FinanceState, action: str, **extra: Any) -> None:
        try:
            self._persist(new_state)
        except PersistenceError:
            logger.error("Mutation not applied, snapshot write failed", extra={"action": action, **extra}, exc_info=True)
            raise
        self._state = new_state
        logger.info(action, extra=extra)

    def _missing(self, entity: str, entity_id: str) -> None:
        if self.missing_id_policy is MissingIdPolicy.RAISE:
            raise NotFoundError(entity, entity_id)
        logger.debug("Ignoring unknown id", extra={"entity": entity, "entity_id": entity_id})

    @staticmethod
    def _find(items: tuple[T, ...], entity_id: str) -> Optional[T]:
        return next((item for item in items if item.id == entity_id), None)

    @staticmethod
    def _swap(items: tuple[T, ...], updated: T) -> tuple[T, ...]:
        return tuple(updated if item.id == updated.id else item for item in items)

    @staticmethod
    def _merge(current: Mapping[str, Any], changes: Mapping[str, Any], entity: str) -> dict[str, Any]:
        if "id" in changes and changes["id"] != current.get("id"):
            raise ValidationError(f"{entity} id cannot be changed", field="id")
        merged = dict(current)
        merged.update({k: v for k, v in changes.items() if k != "id"})
        return merged

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._state.transactions

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self._find(self._state.transactions, transaction_id)

    def add_transaction(self, data: Mapping[str, Any]) -> Transaction:
        txn = Transaction.from_mapping(data, entity_id=self._id_factory(), today=self.today().isoformat())
        self._commit(
            replace(self._state, transactions=self._state.transactions + (txn,)),
            "Transaction added",
            transaction_id=txn.id,
            type=txn.type.value,
            amount=txn.amount,
        )
        return txn

    def update_transaction(self, transaction_id: str, changes: Mapping[str, Any]) -> Optional[Transaction]:
        current = self.get_transaction(transaction_id)
        if current is None:
            return self._missing("transaction", transaction_id)
        merged = self._merge({"id": current.id, **current.to_mapping()}, changes, "transaction")
        updated = Transaction.from_mapping(merged, entity_id=current.id, today=current.date)
        self._commit(
            replace(self._state, transactions=self._swap(self._state.transactions, updated)),
            "Transaction updated",
            transaction_id=transaction_id,
        )
        return updated

    def delete_transaction(self, transaction_id: str) -> None:
        if self.get_transaction(transaction_id) is None:
            return self._missing("transaction", transaction_id)
        self._commit(
            replace(
                self._state,
                transactions=tuple(t for t in self._state.transactions if t.id != transaction_id),
            ),
            "Transaction deleted",
            transaction_id=transaction_id,
        )

    # Installment plans -------------------------------------------------

    def add_installment_purchase(
        self,
        *,
        description: str,
        total_amount: float,
        installments: int,
        category: str | None = None,
        first_date: date | str | None = None,
    ) -> Transaction:
        """Record an expense paid in ``installments`` equal parts, none paid yet."""

        if isinstance(installments, bool) or not isinstance(installments, int) or installments < 1:
            raise ValidationError("installments must be a whole number >= 1", field="installments")
        if isinstance(total_amount, bool) or not isinstance(total_amount, (int, float)) or total_amount <= 0:
            raise ValidationError("total_amount must be greater than zero", field="total_amount")
        return self.add_transaction(
            {
                "type": TransactionType.EXPENSE.value,
                "amount": total_amount,
                "description": description,
                "category": category or INSTALLMENT_CATEGORY,
                "date": first_date or self.today(),
                "installments": {
                    "total": installments,
                    "current": 1,
                    "installment_value": total_amount / installments,
                    "paid_installments": [],
                },
            }
        )

    def _update_plan(self, transaction_id: str, action: str, change) -> Optional[Transaction]:
        current = self.get_transaction(transaction_id)
        if current is None:
            return self._missing("transaction", transaction_id)
        if current.installments is None:
            raise ValidationError(
                f"transaction '{transaction_id}' has no installment plan", field="installments"
            )
        plan = change(current.installments)
        if plan == current.installments:
            return current
        updated = replace(current, installments=plan)
        self._commit(
            replace(self._state, transactions=self._swap(self._state.transactions, updated)),
            action,
            transaction_id=transaction_id,
            paid=plan.paid_count,
            total=plan.total,
        )
        return updated

    def mark_installment_paid(self, transaction_id: str, number: int) -> Optional[Transaction]:
        return self._update_plan(transaction_id, "Installment paid", lambda p: p.with_paid(number))

    def mark_installment_unpaid(self, transaction_id: str, number: int) -> Optional[Transaction]:
        return self._update_plan(transaction_id, "Installment unpaid", lambda p: p.without_paid(number))

    def pay_off_installments(self, transaction_id: str) -> Optional[Transaction]:
        return self._update_plan(transaction_id, "Installments paid off", lambda p: p.settled())

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    @property
    def assets(self) -> tuple[Asset, ...]:
        return self._state.assets

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        return self._find(self._state.assets, asset_id)

    def add_asset(self, data: Mapping[str, Any]) -> Asset:
        asset = Asset.from_mapping(data, entity_id=self._id_factory(), today=self.today().isoformat())
        self._commit(
            replace(self._state, assets=self._state.assets + (asset,)),
            "Asset added",
            asset_id=asset.id,
            asset_type=asset.type.value,
        )
        return asset

    def update_asset(self, asset_id: str, changes: Mapping[str, Any]) -> Optional[Asset]:
        current = self.get_asset(asset_id)
        if current is None:
            return self._missing("asset", asset_id)
        merged = self._merge({"id": current.id, **current.to_mapping()}, changes, "asset")
        updated = Asset.from_mapping(merged, entity_id=current.id, today=current.purchase_date)
        self._commit(
            replace(self._state, assets=self._swap(self._state.assets, updated)),
            "Asset updated",
            asset_id=asset_id,
        )
        return updated

    def delete_asset(self, asset_id: str) -> None:
        if self.get_asset(asset_id) is None:
            return self._missing("asset", asset_id)
        self._commit(
            replace(self._state, assets=tuple(a for a in self._state.assets if a.id != asset_id)),
            "Asset deleted",
            asset_id=asset_id,
        )

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    @property
    def goals(self) -> tuple[Goal, ...]:
        return self._state.goals

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        return self._find(self._state.goals, goal_id)

    def add_goal(self, data: Mapping[str, Any]) -> Goal:
        """Create a goal.

        When no ``monthly_contribution`` is given, the deposit required to hit
        the target by the deadline is filled in.
        """

        goal = Goal.from_mapping(data, entity_id=self._id_factory())
        if data.get("monthly_contribution") in (None, ""):
            goal = replace(goal, monthly_contribution=self.required_monthly_contribution(goal))
        self._commit(
            replace(self._state, goals=self._state.goals + (goal,)),
            "Goal added",
            goal_id=goal.id,
            target=goal.target_amount,
        )
        return goal

    def update_goal(self, goal_id: str, changes: Mapping[str, Any]) -> Optional[Goal]:
        if "contributions" in changes:
            raise ValidationError(
                "contributions can only be appended through add_contribution", field="contributions"
            )
        current = self.get_goal(goal_id)
        if current is None:
            return self._missing("goal", goal_id)
        merged = self._merge({"id": current.id, **current.to_mapping()}, changes, "goal")
        updated = Goal.from_mapping(merged, entity_id=current.id, contributions=current.contributions)
        self._commit(
            replace(self._state, goals=self._swap(self._state.goals, updated)),
            "Goal updated",
            goal_id=goal_id,
        )
        return updated

    def delete_goal(self, goal_id: str) -> None:
        if self.get_goal(goal_id) is None:
            return self._missing("goal", goal_id)
        self._commit(
            replace(self._state, goals=tuple(g for g in self._state.goals if g.id != goal_id)),
            "Goal deleted",
            goal_id=goal_id,
        )

    def add_contribution(
        self, goal_id: str, amount: float, *, when: datetime | None = None
    ) -> Optional[Contribution]:
        """Append a contribution and raise the goal's ``current_amount`` by the same amount."""

        if (
            isinstance(amount, bool)
            or not isinstance(amount, (int, float))
            or not math.isfinite(amount)
            or amount <= 0
        ):
            raise ValidationError("contribution amount must be a positive number", field="amount")

        goal = self.get_goal(goal_id)
        if goal is None:
            return self._missing("goal", goal_id)

        contribution = Contribution(
            id=self._id_factory(),
            amount=float(amount),
            date=(when or self._clock()).isoformat(),
        )
        updated = goal.with_contribution(contribution)
        self._commit(
            replace(self._state, goals=self._swap(self._state.goals, updated)),
            "Contribution added",
            goal_id=goal_id,
            amount=contribution.amount,
            current_amount=updated.current_amount,
        )
        return contribution

    # ------------------------------------------------------------------
    # Investments (saved projection scenarios)
    # ------------------------------------------------------------------

    @property
    def investments(self) -> tuple[Investment, ...]:
        return self._state.investments

    def get_investment(self, investment_id: str) -> Optional[Investment]:
        return self._find(self._state.investments, investment_id)

    def add_investment(self, data: Mapping[str, Any]) -> Investment:
        investment = Investment.from_mapping(data, entity_id=self._id_factory())
        self._commit(
            replace(self._state, investments=self._state.investments + (investment,)),
            "Investment scenario added",
            investment_id=investment.id,
        )
        return investment

    def update_investment(self, investment_id: str, changes: Mapping[str, Any]) -> Optional[Investment]:
        current = self.get_investment(investment_id)
        if current is None:
            return self._missing("investment", investment_id)
        merged = self._merge({"id": current.id, **current.to_mapping()}, changes, "investment")
        updated = Investment.from_mapping(merged, entity_id=current.id)
        self._commit(
            replace(self._state, investments=self._swap(self._state.investments, updated)),
            "Investment scenario updated",
            investment_id=investment_id,
        )
        return updated

    def delete_investment(self, investment_id: str) -> None:
        if self.get_investment(investment_id) is None:
            return self._missing("investment", investment_id)
        self._commit(
            replace(
                self._state,
                investments=tuple(i for i in self._state.investments if i.id != investment_id),
            ),
            "Investment scenario deleted",
            investment_id=investment_id,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def total_balance(self) -> float:
        return aggregation.total_balance(self._state.transactions)

    def monthly_income(self, as_of: date | None = None) -> float:
        return aggregation.monthly_income(self._state.transactions, as_of=as_of or self.today())

    def monthly_expenses(self, as_of: date | None = None) -> float:
        return aggregation.monthly_expenses(self._state.transactions, as_of=as_of or self.today())

    def monthly_summary(self, as_of: date | None = None) -> aggregation.MonthlySummary:
        return aggregation.monthly_summary(self._state.transactions, as_of=as_of or self.today())

    def list_transactions(self, kind: str = "all") -> list[Transaction]:
        """Transactions of ``kind`` (``all``, ``income`` or ``expense``), newest first."""
        return aggregation.transactions_by_type(self._state.transactions, kind)

    def assets_value(self) -> float:
        return aggregation.assets_value(self._state.assets)

    def portfolio_summary(self) -> dict[str, Any]:
        return {
            "return": aggregation.portfolio_return(self._state.assets),
            "distribution": aggregation.portfolio_distribution(self._state.assets),
            "assets": {a.id: aggregation.asset_return(a) for a in self._state.assets},
        }

    def asset_ranking(self) -> list[tuple[Asset, aggregation.AssetReturn]]:
        return aggregation.asset_ranking(self._state.assets)

    def goal_overview(self, as_of: date | None = None) -> list[dict[str, Any]]:
        when = as_of or self.today()
        return [
            {
                "goal": goal,
                "progress": aggregation.goal_progress(goal),
                "status": aggregation.goal_status(goal, as_of=when),
                "days_left": aggregation.days_left(goal, as_of=when),
                "required_monthly": self.required_monthly_contribution(goal, as_of=when),
            }
            for goal in self._state.goals
        ]

    def overall_goal_progress(self) -> float:
        return aggregation.overall_goal_progress(self._state.goals)

    def required_monthly_contribution(self, goal: Goal, as_of: date | None = None) -> float:
        return projections.required_monthly_contribution(
            target=goal.target_amount,
            current=goal.current_amount,
            deadline=date.fromisoformat(goal.deadline),
            annual_return_pct=goal.expected_return,
            as_of=as_of or self.today(),
        )

    def installment_overview(self, as_of: date | None = None) -> dict[str, Any]:
        when = as_of or self.today()
        plans = installments.installment_transactions(self._state.transactions)
        return {
            "totals": installments.installment_totals(plans),
            "plans": [
                {
                    "transaction": txn,
                    "status": installments.installment_status(txn.installments),
                    "schedule": installments.installment_schedule(txn, as_of=when),
                }
                for txn in plans
            ],
        }


__all__ = ["FinanceStore", "INSTALLMENT_CATEGORY"]
