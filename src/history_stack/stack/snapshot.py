"""Exportable stack contents and the checks applied before importing them."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, List, Mapping, TypeVar

from .options import UNBOUNDED

T = TypeVar("T")

_TEXT_TYPES = (str, bytes, bytearray)


class InvalidSnapshotError(ValueError):
    """Raised when a snapshot cannot be adopted without breaking the stack."""

    def __init__(self, message: str, *, snapshot: Any = None) -> None:
        super().__init__(message)
        self.snapshot = snapshot


@dataclass(slots=True)
class Snapshot(Generic[T]):
    """Entries plus pointer, the only state a stack hands out for storage.

    The entries themselves are not copied or serialized; if the snapshot is
    persisted, making the stored values serializable is up to the caller.
    """

    entries: List[T] = field(default_factory=list)
    pointer: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"entries": list(self.entries), "pointer": self.pointer}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Snapshot[Any]":
        try:
            entries = data["entries"]
            raw_pointer = data["pointer"]
        except KeyError as exc:
            raise InvalidSnapshotError(
                f"Snapshot is missing the {exc.args[0]!r} field", snapshot=data
            ) from exc
        except TypeError as exc:
            raise InvalidSnapshotError(
                "Snapshot must be a mapping with 'entries' and 'pointer'",
                snapshot=data,
            ) from exc
        return cls(
            entries=_as_entry_list(entries, data),
            pointer=_as_pointer(raw_pointer, data),
        )

    @classmethod
    def coerce(cls, value: "Snapshot[Any] | Mapping[str, Any]") -> "Snapshot[Any]":
        """Normalize ``value`` to a snapshot with a list of entries and an int pointer.

        An existing entry list is reused, not copied.
        """

        if not isinstance(value, Snapshot):
            return cls.from_mapping(value)
        entries = _as_entry_list(value.entries, value)
        pointer = _as_pointer(value.pointer, value)
        if entries is value.entries and pointer == value.pointer:
            return value
        return cls(entries=entries, pointer=pointer)


def _as_entry_list(entries: Any, source: Any) -> List[Any]:
    if isinstance(entries, list):
        return entries
    if not isinstance(entries, Sequence) or isinstance(entries, _TEXT_TYPES):
        raise InvalidSnapshotError(
            "Snapshot entries must be a sequence", snapshot=source
        )
    return list(entries)


def _as_pointer(raw: Any, source: Any) -> int:
    if isinstance(raw, bool):
        raise InvalidSnapshotError(
            f"Snapshot pointer {raw!r} is not an integer", snapshot=source
        )
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidSnapshotError(
            f"Snapshot pointer {raw!r} is not an integer", snapshot=source
        ) from exc


def ensure_snapshot(snapshot: Snapshot[T], *, limit: int = UNBOUNDED) -> Snapshot[T]:
    size = len(snapshot.entries)
    if snapshot.pointer < 0 or snapshot.pointer > size:
        raise InvalidSnapshotError(
            f"Snapshot pointer {snapshot.pointer} outside 0..{size}",
            snapshot=snapshot,
        )
    if limit != UNBOUNDED and size > limit:
        raise InvalidSnapshotError(
            f"Snapshot holds {size} entries, more than the limit of {limit}",
            snapshot=snapshot,
        )
    return snapshot
