"""Tests for ledger, portfolio and goal aggregates."""

from __future__ import annotations

from datetime import date

import pytest

from finboard.models.asset import Asset, AssetType
from finboard.models.goal import Goal
from finboard.models.transaction import Transaction, TransactionType
from finboard.services import aggregation
from finboard.services.aggregation import GoalStatus


def _txn(txn_id: str, kind: TransactionType, amount: float, category: str, on: str) -> Transaction:
    return Transaction(
        id=txn_id,
        type=kind,
        amount=amount,
        description=f"{category} {txn_id}",
        category=category,
        date=on,
    )


def _asset(asset_id: str, asset_type: AssetType, quantity: float, paid: float, price: float) -> Asset:
    return Asset(
        id=asset_id,
        name=asset_id.upper(),
        type=asset_type,
        quantity=quantity,
        purchase_price=paid,
        current_price=price,
        purchase_date="2024-01-01",
    )


def _goal(current: float, target: float = 1000.0, deadline: str = "2025-12-31") -> Goal:
    return Goal(
        id="goal-1",
        name="Reserva",
        target_amount=target,
        current_amount=current,
        deadline=deadline,
        monthly_contribution=0.0,
        expected_return=0.0,
    )


@pytest.fixture
def ledger() -> list[Transaction]:
    income, expense = TransactionType.INCOME, TransactionType.EXPENSE
    return [
        _txn("t1", income, 5000, "Salário", "2025-03-01"),
        _txn("t2", expense, 1200, "Moradia", "2025-03-05"),
        _txn("t3", expense, 300, "Alimentação", "2025-03-10"),
        _txn("t4", expense, 200, "Alimentação", "2025-03-12"),
        _txn("t5", expense, 900, "Lazer", "2025-02-20"),
        _txn("t6", income, 400, "Freelance", "2025-01-15"),
    ]


class TestLedger:
    def test_total_balance_is_income_minus_expenses(self, ledger):
        assert aggregation.total_balance(ledger) == pytest.approx(5400 - 2600)

    def test_empty_ledger(self):
        assert aggregation.total_balance([]) == 0
        assert aggregation.expenses_by_category([]) == []

    def test_monthly_figures_use_as_of_month(self, ledger):
        as_of = date(2025, 3, 20)
        assert aggregation.monthly_income(ledger, as_of=as_of) == pytest.approx(5000)
        assert aggregation.monthly_expenses(ledger, as_of=as_of) == pytest.approx(1700)
        summary = aggregation.monthly_summary(ledger, as_of=as_of)
        assert summary.month == "2025-03"
        assert summary.net == pytest.approx(3300)

    def test_history_is_oldest_first(self, ledger):
        history = aggregation.monthly_history(ledger, as_of=date(2025, 3, 20), months=3)
        assert [h.month for h in history] == ["2025-01", "2025-02", "2025-03"]
        assert history[0].income == pytest.approx(400)
        assert history[1].expenses == pytest.approx(900)

    def test_history_crosses_year_boundary(self):
        history = aggregation.monthly_history([], as_of=date(2025, 2, 1), months=6)
        assert [h.month for h in history][:2] == ["2024-09", "2024-10"]
        assert len(history) == 6

    def test_expenses_by_category_sorted_descending(self, ledger):
        breakdown = aggregation.expenses_by_category(ledger)
        assert breakdown == [("Moradia", 1200), ("Lazer", 900), ("Alimentação", 500)]

    def test_expenses_by_category_for_one_month(self, ledger):
        breakdown = aggregation.expenses_by_category(ledger, as_of=date(2025, 3, 1))
        assert [name for name, _ in breakdown] == ["Moradia", "Alimentação"]
        assert aggregation.top_categories(breakdown, limit=1) == [("Moradia", 1200)]

    @pytest.mark.parametrize(
        "kind, expected",
        [
            ("all", ["t4", "t3", "t2", "t1", "t5", "t6"]),
            ("income", ["t1", "t6"]),
            ("expense", ["t4", "t3", "t2", "t5"]),
        ],
    )
    def test_transactions_by_type_newest_first(self, ledger, kind, expected):
        assert [t.id for t in aggregation.transactions_by_type(ledger, kind)] == expected

    def test_transactions_by_type_rejects_unknown_filter(self, ledger):
        with pytest.raises(ValueError):
            aggregation.transactions_by_type(ledger, "transfer")


class TestPortfolio:
    def test_asset_return(self):
        result = aggregation.asset_return(_asset("petr4", AssetType.VARIABLE_INCOME, 100, 32.5, 38.2))
        assert result.invested == pytest.approx(3250)
        assert result.current_value == pytest.approx(3820)
        assert result.absolute_return == pytest.approx(570)
        assert result.percentage_return == pytest.approx(570 / 3250 * 100)

    def test_zero_quantity_has_no_percentage(self):
        result = aggregation.asset_return(_asset("empty", AssetType.FUND, 0, 10, 12))
        assert result.invested == 0
        assert result.percentage_return is None

    def test_zero_purchase_price_has_no_percentage(self):
        result = aggregation.asset_return(_asset("gift", AssetType.FUND, 10, 0, 5))
        assert result.invested == 0
        assert result.absolute_return == pytest.approx(50)
        assert result.percentage_return is None

    def test_empty_portfolio(self):
        result = aggregation.portfolio_return([])
        assert result.invested == 0
        assert result.percentage == 0.0

    def test_portfolio_totals_and_distribution(self):
        assets = [
            _asset("selic", AssetType.FIXED_INCOME, 1000, 100, 108.5),
            _asset("btc", AssetType.CRYPTO, 0.5, 160000, 180000),
            _asset("cdb", AssetType.FIXED_INCOME, 10, 100, 110),
        ]
        result = aggregation.portfolio_return(assets)
        assert result.invested == pytest.approx(100000 + 80000 + 1000)
        assert result.current_value == pytest.approx(108500 + 90000 + 1100)
        assert aggregation.assets_value(assets) == pytest.approx(result.current_value)

        distribution = aggregation.portfolio_distribution(assets)
        assert list(distribution) == [AssetType.FIXED_INCOME, AssetType.CRYPTO]
        assert distribution[AssetType.FIXED_INCOME] == pytest.approx(109600)

    def test_ranking_by_percentage_with_unpriced_assets_last(self):
        assets = [
            _asset("gift", AssetType.FUND, 10, 0, 5),
            _asset("loss", AssetType.VARIABLE_INCOME, 10, 100, 80),
            _asset("btc", AssetType.CRYPTO, 1, 1000, 1500),
            _asset("cdb", AssetType.FIXED_INCOME, 10, 100, 110),
        ]
        ranking = aggregation.asset_ranking(assets)
        assert [asset.id for asset, _ in ranking] == ["btc", "cdb", "loss", "gift"]
        assert ranking[0][1].percentage_return == pytest.approx(50)
        assert ranking[-1][1].percentage_return is None

    def test_ranking_empty_portfolio(self):
        assert aggregation.asset_ranking([]) == []


class TestGoals:
    def test_progress_can_exceed_hundred(self):
        assert aggregation.goal_progress(_goal(1500)) == pytest.approx(150)

    def test_completed_takes_priority_over_overdue(self):
        goal = _goal(1000, deadline="2024-01-01")
        assert aggregation.goal_status(goal, as_of=date(2025, 3, 15)) is GoalStatus.COMPLETED

    def test_overdue(self):
        goal = _goal(100, deadline="2025-03-14")
        assert aggregation.goal_status(goal, as_of=date(2025, 3, 15)) is GoalStatus.OVERDUE
        assert aggregation.days_left(goal, as_of=date(2025, 3, 15)) == -1

    def test_urgent_window(self):
        as_of = date(2025, 3, 1)
        assert aggregation.goal_status(_goal(100, deadline="2025-03-31"), as_of=as_of) is GoalStatus.URGENT
        assert aggregation.goal_status(_goal(100, deadline="2025-04-01"), as_of=as_of) is GoalStatus.ACTIVE

    def test_completed_and_target_totals(self):
        goals = [_goal(1000), _goal(10, target=500)]
        assert len(aggregation.completed_goals(goals)) == 1
        assert aggregation.goals_target_total(goals) == pytest.approx(1500)

    def test_overall_progress_weights_by_target(self):
        goals = [_goal(1000), _goal(250, target=3000)]
        assert aggregation.overall_goal_progress(goals) == pytest.approx(1250 / 4000 * 100)

    def test_overall_progress_without_target_is_zero(self):
        assert aggregation.overall_goal_progress([]) == 0.0
        assert aggregation.overall_goal_progress([_goal(50, target=0)]) == 0.0
