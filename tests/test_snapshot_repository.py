"""Tests for the SQLModel-backed snapshot storage."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from finboard.errors import PersistenceError
from finboard.infra.repositories import SQLModelSnapshotRepository
from finboard.models.snapshot import StoreSnapshot
from finboard.services.store import FinanceStore
from tests.conftest import FROZEN_NOW


class TestSnapshotRepository:
    def test_read_missing_key(self, snapshot_repo):
        assert snapshot_repo.read("finance-storage") is None

    def test_write_then_read(self, snapshot_repo):
        snapshot_repo.write("finance-storage", '{"state": {}, "version": 0}')
        assert snapshot_repo.read("finance-storage") == '{"state": {}, "version": 0}'

    def test_overwrite_keeps_single_row(self, snapshot_repo, session_factory):
        snapshot_repo.write("k", "one")
        snapshot_repo.write("k", "two")

        assert snapshot_repo.read("k") == "two"
        with session_factory() as session:
            rows = session.exec(select(StoreSnapshot)).all()
        assert len(rows) == 1
        assert rows[0].updated_at is not None

    def test_keys_are_independent(self, snapshot_repo):
        snapshot_repo.write("a", "1")
        snapshot_repo.write("b", "2")
        assert (snapshot_repo.read("a"), snapshot_repo.read("b")) == ("1", "2")

    def test_delete(self, snapshot_repo):
        snapshot_repo.write("k", "v")
        snapshot_repo.delete("k")
        snapshot_repo.delete("never-written")
        assert snapshot_repo.read("k") is None

    def test_database_errors_become_persistence_errors(self):
        def broken_factory():
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        repo = SQLModelSnapshotRepository(broken_factory)
        with pytest.raises(PersistenceError):
            repo.read("k")
        with pytest.raises(PersistenceError):
            repo.write("k", "v")


def test_store_survives_restart(snapshot_repo):
    """A second store loaded from the same database sees the first one's writes."""
    first = FinanceStore.load(snapshot_repo, clock=lambda: FROZEN_NOW)
    first.add_transaction(
        {"type": "income", "amount": 3200, "description": "Salário", "category": "Receita"}
    )
    goal = first.add_goal(
        {"name": "Reserva", "target_amount": 10000, "deadline": "2026-01-01", "monthly_contribution": 500}
    )
    first.add_contribution(goal.id, 500)
    first.close()

    second = FinanceStore.load(snapshot_repo)
    assert second.state == first.state
    assert second.total_balance() == pytest.approx(3200)
    assert second.get_goal(goal.id).current_amount == pytest.approx(500)
