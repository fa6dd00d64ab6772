"""Service module exports."""

from . import (
    aggregation,
    installments,
    interpreter,
    projections,
    seed,
    snapshot,
    store,
)

__all__ = [
    "aggregation",
    "installments",
    "interpreter",
    "projections",
    "seed",
    "snapshot",
    "store",
]
