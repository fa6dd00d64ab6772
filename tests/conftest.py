"""Pytest configuration and shared fixtures for finboard tests.

Provides a throwaway SQLite database, in-memory snapshot storage, a store with
a frozen clock and deterministic ids, and small float helpers.
"""

from __future__ import annotations

import itertools
import logging
import random
import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from finboard import models  # noqa: F401  registers the snapshot table
from finboard.config import MissingIdPolicy
from finboard.infra.database import create_session_factory
from finboard.infra.repositories import SQLModelSnapshotRepository
from finboard.logging_config import LOGGER_NAME
from finboard.services.interpreter import CommandInterpreter
from finboard.services.store import FinanceStore

FROZEN_NOW = datetime(2025, 3, 15, 10, 0)
FROZEN_TODAY = FROZEN_NOW.date()


# =============================================================================
# Logging isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_finboard_logger():
    """Detach handlers a test (or the CLI) attached to the finboard logger."""

    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


# =============================================================================
# Storage Fixtures
# =============================================================================


class MemoryStorage:
    """Dict-backed snapshot storage."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})
        self.writes = 0

    def read(self, key: str):
        return self.data.get(key)

    def write(self, key: str, value: str) -> None:
        self.data[key] = value
        self.writes += 1

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class FailingStorage(MemoryStorage):
    """Storage whose writes fail once ``fail`` is switched on, and reads once ``fail_reads`` is."""

    def __init__(self, initial: dict[str, str] | None = None):
        super().__init__(initial)
        self.fail = False
        self.fail_reads = False

    def read(self, key: str):
        if self.fail_reads:
            raise OSError("permission denied")
        return super().read(key)

    def write(self, key: str, value: str) -> None:
        if self.fail:
            raise OSError("disk full")
        super().write(key, value)


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def failing_storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with the snapshot table created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Context-managed session factory, as the application builds it."""

    return create_session_factory(db_engine)


@pytest.fixture
def snapshot_repo(session_factory) -> SQLModelSnapshotRepository:
    return SQLModelSnapshotRepository(session_factory)


# =============================================================================
# Store Fixtures
# =============================================================================


def sequential_ids(prefix: str = "id"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


@pytest.fixture
def store_factory(memory_storage):
    """Factory for stores with a frozen clock and predictable ids.

    Returns:
        Callable: Function accepting FinanceStore keyword overrides
    """

    def _create_store(**overrides) -> FinanceStore:
        options = {
            "clock": lambda: FROZEN_NOW,
            "id_factory": sequential_ids(),
            "missing_id_policy": MissingIdPolicy.RAISE,
        }
        options.update(overrides)
        storage = options.pop("storage", memory_storage)
        return FinanceStore(storage, **options)

    return _create_store


@pytest.fixture
def store(store_factory) -> FinanceStore:
    return store_factory()


@pytest.fixture
def interpreter(store) -> CommandInterpreter:
    return CommandInterpreter(store, rng=random.Random(7))


@pytest.fixture
def today() -> date:
    return FROZEN_TODAY


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance.

    Args:
        actual: Actual value
        expected: Expected value
        tolerance: Maximum allowed difference (default 0.01 = 1 centavo)
    """
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (diff: {abs(actual - expected)})"
