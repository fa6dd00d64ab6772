"""Snapshot storage protocol."""

from __future__ import annotations

from typing import Optional, Protocol


class SnapshotStorage(Protocol):
    """Blocking key/value storage for serialized store state."""

    def read(self, key: str) -> Optional[str]:
        """Return the stored document for ``key`` or ``None`` when absent."""
        ...

    def write(self, key: str, value: str) -> None:
        """Replace whatever is stored under ``key`` with ``value``."""
        ...

    def delete(self, key: str) -> None:
        """Remove ``key``; absent keys are ignored."""
        ...
