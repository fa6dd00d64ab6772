"""End-to-end tests for the ``finboard`` command line."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from finboard.cli import main


@pytest.fixture
def run(tmp_path):
    """Invoke the CLI against a throwaway data directory."""

    runner = CliRunner()
    env = {
        "FINBOARD_DATA_DIR": str(tmp_path),
        "FINBOARD_DATABASE_URL": None,
        "FINBOARD_STORAGE_KEY": None,
        "FINBOARD_MISSING_ID_POLICY": None,
        "FINBOARD_CHAT_DELAY": "0",
        "FINBOARD_SEED_DEMO": "0",
    }

    def _invoke(*args, input=None):
        return runner.invoke(main, ["--quiet", *args], env=env, input=input)

    return _invoke


def test_categories(run):
    result = run("categories")
    assert result.exit_code == 0
    assert "Alimentação" in result.output
    assert "Salário" in result.output


def test_chat_records_and_persists(run, tmp_path):
    result = run("chat", "--no-delay", "Gastei", "R$", "50", "no", "supermercado")
    assert result.exit_code == 0, result.output
    assert "Gasto registrado com sucesso" in result.output
    assert (tmp_path / "finboard.db").exists()

    result = run("summary")
    assert result.exit_code == 0, result.output
    assert "-R$ 50,00" in result.output


def test_chat_without_message_greets(run, tmp_path):
    result = run("chat")
    assert result.exit_code == 0
    assert "Sou seu assistente financeiro" in result.output
    assert not (tmp_path / "finboard.db").exists()


def test_chat_with_simulated_delay(run):
    result = run("chat", "qual", "meu", "saldo?")
    assert result.exit_code == 0, result.output
    assert "Saldo total" in result.output


def test_seed_and_reports(run):
    result = run("seed", "--yes")
    assert result.exit_code == 0, result.output
    assert "4 transactions" in result.output

    summary = run("summary")
    assert "Casa Própria" in summary.output
    assert "Renda Fixa" in summary.output

    installments = run("installments")
    assert installments.exit_code == 0, installments.output
    assert "Celular iPhone: 2/12 [partial]" in installments.output


def test_seed_asks_for_confirmation(run):
    result = run("seed", input="n\n")
    assert result.exit_code == 1
    assert "Demo data loaded" not in result.output


def test_project(run):
    result = run("project", "--initial", "10000", "--monthly", "1000", "--months", "1", "--rate", "12")
    assert result.exit_code == 0, result.output
    assert "R$ 11.110,00" in result.output
    assert "Total aportado: R$ 11.000,00" in result.output


def test_project_rejects_non_finite_rate(run):
    result = run("project", "--months", "2", "--rate", "nan")
    assert result.exit_code == 2


def test_compare(run):
    result = run(
        "compare", "--price", "1200", "--discount", "10", "--installment", "100", "--count", "12"
    )
    assert result.exit_code == 0, result.output
    assert "À vista: R$ 1.080,00" in result.output
    assert "Recomendação: à vista" in result.output
