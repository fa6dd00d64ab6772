"""Exception types raised by the finboard core."""

from __future__ import annotations


class FinanceError(Exception):
    """Base class for every error raised by finboard."""


class ValidationError(FinanceError, ValueError):
    """Input was missing, non-numeric or out of range; nothing was mutated."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(FinanceError, LookupError):
    """An update/delete referenced an id that is not in the store."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} '{entity_id}' not found")
        self.entity = entity
        self.entity_id = entity_id


class PersistenceError(FinanceError, RuntimeError):
    """Reading or writing the store snapshot failed."""


__all__ = ["FinanceError", "ValidationError", "NotFoundError", "PersistenceError"]
