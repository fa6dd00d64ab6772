"""SQLModel implementation of snapshot storage."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ...errors import PersistenceError
from ...logging_config import get_logger
from ...models.snapshot import StoreSnapshot

logger = get_logger("storage")


class SQLModelSnapshotRepository:
    """Stores one JSON document per key in the ``store_snapshot`` table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def read(self, key: str) -> Optional[str]:
        try:
            with self.session_factory() as session:
                row = session.exec(select(StoreSnapshot).where(StoreSnapshot.key == key)).first()
                return row.value if row else None
        except SQLAlchemyError as exc:
            logger.error("Snapshot read failed", extra={"key": key}, exc_info=True)
            raise PersistenceError(f"Could not read snapshot '{key}': {exc}") from exc

    def write(self, key: str, value: str) -> None:
        try:
            with self.session_factory() as session:
                row = session.exec(select(StoreSnapshot).where(StoreSnapshot.key == key)).first()
                if row:
                    row.value = value
                    row.updated_at = datetime.now(timezone.utc)
                else:
                    row = StoreSnapshot(key=key, value=value)
                session.add(row)
                session.commit()
        except SQLAlchemyError as exc:
            logger.error("Snapshot write failed", extra={"key": key}, exc_info=True)
            raise PersistenceError(f"Could not write snapshot '{key}': {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            with self.session_factory() as session:
                row = session.exec(select(StoreSnapshot).where(StoreSnapshot.key == key)).first()
                if row:
                    session.delete(row)
                    session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not delete snapshot '{key}': {exc}") from exc


__all__ = ["SQLModelSnapshotRepository"]
