"""Application context: builds the store and its collaborators once per process."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from .config import BaseConfig
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelSnapshotRepository
from .logging_config import get_logger
from .services.interpreter import CommandInterpreter
from .services.seed import demo_state
from .services.store import FinanceStore

logger = get_logger("context")


@dataclass
class AppContext:
    """Centralized application context with services and state."""

    config: BaseConfig
    engine: Engine
    session_factory: Callable[[], Session]
    snapshot_repo: SQLModelSnapshotRepository
    store: FinanceStore
    interpreter: CommandInterpreter
    closed: bool = False

    def close(self) -> None:
        """Write the final snapshot and release the database engine."""

        if self.closed:
            return
        try:
            self.store.close()
        finally:
            self.engine.dispose()
            self.closed = True


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create the engine, load the persisted store and wire the interpreter."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)
    snapshot_repo = SQLModelSnapshotRepository(session_factory)

    store = FinanceStore.load(
        snapshot_repo,
        key=config.STORAGE_KEY,
        default_state=demo_state() if config.SEED_DEMO else None,
        missing_id_policy=config.MISSING_ID_POLICY,
    )
    interpreter = CommandInterpreter(store, response_delay=config.CHAT_RESPONSE_DELAY)

    logger.info(
        "Application context ready",
        extra={"storage_key": config.STORAGE_KEY, "policy": config.MISSING_ID_POLICY.value},
    )
    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        snapshot_repo=snapshot_repo,
        store=store,
        interpreter=interpreter,
    )


@contextmanager
def app_context(config: Optional[BaseConfig] = None) -> Iterator[AppContext]:
    """``with`` form of :func:`create_app_context` that always closes."""

    ctx = create_app_context(config)
    try:
        yield ctx
    finally:
        ctx.close()
