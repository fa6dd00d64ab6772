"""Command line entry point (``finboard``)."""

from __future__ import annotations

import asyncio

import click

from .config import BaseConfig
from .constants.categories import ASSET_TYPE_LABELS, get_expense_categories, get_income_categories
from .context import app_context
from .errors import FinanceError
from .logging_config import setup_logging
from .services import aggregation, projections
from .services.interpreter import GREETING, format_brl
from .services.seed import demo_state


@click.group()
@click.option("--quiet", is_flag=True, default=False, help="Only log warnings to the console")
@click.pass_context
def main(ctx: click.Context, quiet: bool) -> None:
    """Personal finance tracker."""

    config = BaseConfig()
    if quiet:
        config.DEV_MODE = False
    setup_logging(config)
    ctx.obj = config


@main.command("chat")
@click.argument("message", nargs=-1)
@click.option("--no-delay", is_flag=True, default=False, help="Skip the simulated thinking time")
@click.pass_obj
def chat(config: BaseConfig, message: tuple[str, ...], no_delay: bool) -> None:
    """Send MESSAGE to the assistant, e.g. finboard chat Gastei R$ 50 no mercado."""

    if not message:
        click.echo(GREETING)
        return

    text = " ".join(message)
    with app_context(config) as app:
        if no_delay:
            reply = app.interpreter.process(text)
        else:
            reply = asyncio.run(app.interpreter.process_async(text))
    click.echo(reply.text)


@main.command("summary")
@click.pass_obj
def summary(config: BaseConfig) -> None:
    """Print balance, this month's cash flow and portfolio value."""

    with app_context(config) as app:
        store = app.store
        month = store.monthly_summary()
        portfolio = aggregation.portfolio_return(store.assets)
        click.echo(f"Saldo total:        {format_brl(store.total_balance())}")
        click.echo(f"Receitas ({month.month}): {format_brl(month.income)}")
        click.echo(f"Gastos ({month.month}):   {format_brl(month.expenses)}")
        click.echo(f"Patrimônio:         {format_brl(portfolio.current_value)} ({portfolio.percentage:.2f}%)")
        for asset_type, value in aggregation.portfolio_distribution(store.assets).items():
            click.echo(f"  {ASSET_TYPE_LABELS[asset_type]}: {format_brl(value)}")
        for row in store.goal_overview():
            goal = row["goal"]
            click.echo(
                f"Meta {goal.name}: {row['progress']:.1f}% [{row['status'].value}] "
                f"aporte necessário {format_brl(row['required_monthly'])}/mês"
            )


@main.command("installments")
@click.pass_obj
def installments_cmd(config: BaseConfig) -> None:
    """List installment purchases and what is still owed."""

    with app_context(config) as app:
        overview = app.store.installment_overview()
        for plan in overview["plans"]:
            txn = plan["transaction"]
            overdue = sum(1 for due in plan["schedule"] if due.is_overdue)
            click.echo(
                f"{txn.description}: {txn.installments.paid_count}/{txn.installments.total} "
                f"[{plan['status'].value}] atrasadas: {overdue}"
            )
        totals = overview["totals"]
        click.echo(f"Total: {format_brl(totals.total_value)}  Pago: {format_brl(totals.paid)}  Restante: {format_brl(totals.remaining)}")


@main.command("seed")
@click.option("--yes", is_flag=True, default=False, help="Replace existing data without asking")
@click.pass_obj
def seed(config: BaseConfig, yes: bool) -> None:
    """Replace all data with the demo dataset."""

    if not yes:
        click.confirm("This replaces every stored transaction, asset and goal. Continue?", abort=True)
    with app_context(config) as app:
        app.store.reset(demo_state())
        counts = app.store.state.counts()
    click.echo("Demo data loaded: " + ", ".join(f"{n} {name}" for name, n in counts.items()))


@main.command("categories")
def categories() -> None:
    """Print the category names used for transactions."""

    click.echo("Receitas: " + ", ".join(get_income_categories()))
    click.echo("Despesas: " + ", ".join(get_expense_categories()))


@main.command("project")
@click.option("--initial", type=float, default=0.0, show_default=True)
@click.option("--monthly", type=float, default=0.0, show_default=True)
@click.option("--months", type=click.IntRange(min=0), required=True)
@click.option("--rate", type=float, required=True, help="Expected annual return in percent")
@click.option("--inflation", type=float, default=0.0, show_default=True, help="Annual inflation in percent")
@click.option("--simple", is_flag=True, default=False, help="Simple instead of compound interest")
def project(initial: float, monthly: float, months: int, rate: float, inflation: float, simple: bool) -> None:
    """Project the growth of regular contributions."""

    try:
        points = projections.project_growth(
            initial=initial,
            monthly_contribution=monthly,
            period_months=months,
            annual_return_pct=rate,
            compound=not simple,
            annual_inflation_pct=inflation,
        )
    except FinanceError as exc:
        raise click.BadParameter(str(exc)) from exc

    for point in points:
        click.echo(f"{point.month:>4}m  {format_brl(point.nominal):>18}  {format_brl(point.real):>18}")
    result = projections.summarize_projection(points, initial=initial, monthly_contribution=monthly)
    click.echo(f"Total aportado: {format_brl(result.total_contributed)}")
    click.echo(f"Rendimento: {format_brl(result.total_return)}")


@main.command("compare")
@click.option("--price", type=float, required=True, help="Full price")
@click.option("--discount", type=float, default=0.0, show_default=True, help="Cash discount in percent")
@click.option("--installment", type=float, required=True, help="Value of each installment")
@click.option("--count", type=click.IntRange(min=1), required=True, help="Number of installments")
@click.option("--rate", type=float, default=0.0, show_default=True, help="Annual investment return in percent")
def compare(price: float, discount: float, installment: float, count: int, rate: float) -> None:
    """Compare paying cash with paying in installments."""

    try:
        result = projections.compare_cash_vs_installments(
            full_price=price,
            cash_discount_pct=discount,
            installment_value=installment,
            installment_count=count,
            annual_investment_return_pct=rate,
        )
    except FinanceError as exc:
        raise click.BadParameter(str(exc)) from exc

    click.echo(f"À vista: {format_brl(result.cash.final_amount)} (desconto {format_brl(result.cash.discount)})")
    click.echo(f"Parcelado: {format_brl(result.installment.total_paid)} (juros {format_brl(result.installment.total_interest)})")
    click.echo(f"Investindo as parcelas: {format_brl(result.investment.final_amount)}")
    label = "à vista" if result.recommendation == "cash" else "parcelado"
    click.echo(f"Recomendação: {label} (diferença {format_brl(result.savings)})")


if __name__ == "__main__":  # pragma: no cover
    main()
