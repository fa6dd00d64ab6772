"""Repository protocol definitions for domain layer."""

from .snapshot import SnapshotStorage

__all__ = ["SnapshotStorage"]
