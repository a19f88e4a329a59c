"""History stack, its construction options, and snapshot types."""

from .history import HistoryStack, StackStats, create
from .options import UNBOUNDED, StackOptions
from .snapshot import InvalidSnapshotError, Snapshot, ensure_snapshot

__all__ = [
    "HistoryStack",
    "StackStats",
    "StackOptions",
    "Snapshot",
    "InvalidSnapshotError",
    "UNBOUNDED",
    "create",
    "ensure_snapshot",
]
