"""Demo dataset used by ``finboard seed`` and first-run seeding."""

from __future__ import annotations

from ..models.asset import Asset, AssetType
from ..models.goal import Goal
from ..models.investment import Investment
from ..models.state import FinanceState
from ..models.transaction import InstallmentPlan, Transaction, TransactionType


def demo_state() -> FinanceState:
    """Return a small, fixed portfolio: one month of ledger entries, three assets, two goals, two scenarios."""

    transactions = (
        Transaction(
            id="demo-txn-1",
            type=TransactionType.INCOME,
            amount=5000.0,
            description="Salário",
            category="Trabalho",
            date="2024-07-01",
            is_recurring=True,
        ),
        Transaction(
            id="demo-txn-2",
            type=TransactionType.EXPENSE,
            amount=1200.0,
            description="Aluguel",
            category="Moradia",
            date="2024-07-05",
            is_recurring=True,
        ),
        Transaction(
            id="demo-txn-3",
            type=TransactionType.EXPENSE,
            amount=800.0,
            description="Supermercado",
            category="Alimentação",
            date="2024-07-10",
        ),
        Transaction(
            id="demo-txn-4",
            type=TransactionType.EXPENSE,
            amount=3600.0,
            description="Celular iPhone",
            category="Tecnologia",
            date="2024-07-15",
            installments=InstallmentPlan(
                total=12, current=3, installment_value=300.0, paid_installments=frozenset({1, 2})
            ),
        ),
    )

    assets = (
        Asset(
            id="demo-asset-1",
            name="Tesouro Selic 2029",
            type=AssetType.FIXED_INCOME,
            quantity=1000.0,
            purchase_price=100.0,
            current_price=108.5,
            purchase_date="2024-01-15",
        ),
        Asset(
            id="demo-asset-2",
            name="PETR4",
            type=AssetType.VARIABLE_INCOME,
            quantity=100.0,
            purchase_price=32.5,
            current_price=38.2,
            purchase_date="2024-03-20",
        ),
        Asset(
            id="demo-asset-3",
            name="Bitcoin",
            type=AssetType.CRYPTO,
            quantity=0.5,
            purchase_price=160000.0,
            current_price=180000.0,
            purchase_date="2024-02-10",
        ),
    )

    goals = (
        Goal(
            id="demo-goal-1",
            name="Casa Própria",
            target_amount=300000.0,
            current_amount=45000.0,
            deadline="2026-12-31",
            monthly_contribution=2000.0,
            expected_return=0.8,
        ),
        Goal(
            id="demo-goal-2",
            name="Viagem Europa",
            target_amount=15000.0,
            current_amount=3000.0,
            deadline="2025-06-30",
            monthly_contribution=500.0,
            expected_return=0.6,
        ),
    )

    investments = (
        Investment(
            id="demo-investment-1",
            name="Reserva de Emergência",
            initial_amount=10000.0,
            monthly_contribution=1000.0,
            expected_return=10.5,
            period=24,
            compound_interest=True,
            inflation=4.5,
        ),
        Investment(
            id="demo-investment-2",
            name="Aposentadoria",
            initial_amount=50000.0,
            monthly_contribution=2000.0,
            expected_return=12.0,
            period=240,
            compound_interest=True,
            inflation=4.0,
        ),
    )

    return FinanceState(transactions=transactions, assets=assets, goals=goals, investments=investments)
