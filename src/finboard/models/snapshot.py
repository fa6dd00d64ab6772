"""SQLModel table holding serialized store snapshots."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreSnapshot(SQLModel, table=True):
    """Key/value row; ``value`` is the full JSON document, overwritten on each write."""

    __tablename__: ClassVar[str] = "store_snapshot"

    key: str = Field(primary_key=True, max_length=64)
    value: str = Field(nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)
