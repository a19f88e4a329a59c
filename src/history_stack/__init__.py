"""Bounded, linear undo/redo history for opaque application states."""

from .stack import (
    UNBOUNDED,
    HistoryStack,
    InvalidSnapshotError,
    Snapshot,
    StackOptions,
    StackStats,
    create,
)

__all__ = [
    "HistoryStack",
    "StackOptions",
    "StackStats",
    "Snapshot",
    "InvalidSnapshotError",
    "UNBOUNDED",
    "create",
]

__version__ = "0.1.0"
