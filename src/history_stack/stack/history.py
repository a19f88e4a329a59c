"""Linear undo/redo history with an optional FIFO capacity limit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, List, Mapping, Optional, TypeVar, Union

from history_stack.runtime.telemetry import record_event, span

from .options import UNBOUNDED, Callback, StackOptions
from .snapshot import Snapshot, ensure_snapshot

T = TypeVar("T")

OptionsLike = Union[StackOptions, Mapping[str, Any], None]
SnapshotLike = Union[Snapshot[Any], Mapping[str, Any]]


@dataclass(slots=True)
class StackStats:
    """Point-in-time view of a stack's bookkeeping."""

    pointer: int
    count: int
    size: int
    limit: int
    can_undo: bool
    can_redo: bool


def _resolve_options(
    options: OptionsLike, overrides: Mapping[str, Any]
) -> StackOptions:
    if options is None:
        resolved = StackOptions()
    elif isinstance(options, StackOptions):
        resolved = options
    else:
        resolved = StackOptions.from_mapping(options)
    return resolved.with_overrides(overrides)


class HistoryStack(Generic[T]):
    """Records opaque states and walks backward/forward through them.

    ``pointer`` counts the applied entries: ``entries[pointer - 1]`` is the
    current state and everything from ``pointer`` on can be redone. Adding
    a state discards the redo tail. With a limit set, pushing at capacity
    evicts the oldest entry; only the most recent eviction is remembered,
    and ``undo`` falls back to it once the pointer walks past the head.

    Stored values are kept by reference. Callers that mutate their state
    objects in place must copy them before calling ``add``.
    """

    def __init__(self, options: OptionsLike = None, **overrides: Any) -> None:
        resolved = _resolve_options(options, overrides)
        self._limit: int = resolved.limit
        self._entries: List[T] = []
        self._pointer: int = 0
        self._count: int = 0
        self._last_purged: Optional[T] = None
        self._logger_name = resolved.logger_name
        self.on_undo: Optional[Callback] = resolved.on_undo
        self.on_redo: Optional[Callback] = resolved.on_redo

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(pointer={self._pointer}, "
            f"size={len(self._entries)}, "
            f"count={self._count}, limit={self._limit})"
        )

    def add(self, data: T) -> int:
        """Push ``data`` as the new current state and return the new pointer."""

        with span(
            "history::add",
            logger_name=self._logger_name,
            component="history",
            metadata={"pointer": self._pointer, "size": len(self._entries)},
        ) as handle:
            pointer = self._pointer
            size = len(self._entries)

            if pointer < size:
                del self._entries[pointer:]
                handle.add_metadata("discarded", size - pointer)
                record_event(
                    "history::redo_discarded",
                    level="debug",
                    data={"count": size - pointer},
                    logger_name=self._logger_name,
                )

            if self._limit != UNBOUNDED and pointer == self._limit:
                self._last_purged = self._entries.pop(0)
                record_event(
                    "history::evicted",
                    level="debug",
                    data={"limit": self._limit},
                    logger_name=self._logger_name,
                )

            self._count += 1
            self._entries.append(data)
            self._pointer = len(self._entries)
            return self._pointer

    def undo(self) -> Optional[T]:
        """Step back and return the state before the current one.

        Returns ``None`` when nothing can be undone. When the previous
        state was evicted, the last purged entry is returned instead.
        ``on_undo`` is always called with the result.
        """

        with span(
            "history::undo",
            logger_name=self._logger_name,
            component="history",
            metadata={"pointer": self._pointer},
        ):
            result: Optional[T] = None
            if self._pointer > 0:
                self._count -= 1
                self._pointer -= 1
                index = self._pointer - 1
                if 0 <= index < len(self._entries):
                    result = self._entries[index]
                else:
                    result = self._last_purged

            if self.on_undo is not None:
                self.on_undo(result)
            return result

    def redo(self) -> Optional[T]:
        """Step forward over a previously undone state and return it.

        Returns ``None`` when there is nothing to redo. ``on_redo`` is
        always called with the result.
        """

        with span(
            "history::redo",
            logger_name=self._logger_name,
            component="history",
            metadata={"pointer": self._pointer},
        ):
            result: Optional[T] = None
            if self._pointer < len(self._entries):
                self._count += 1
                result = self._entries[self._pointer]
                self._pointer += 1

            if self.on_redo is not None:
                self.on_redo(result)
            return result

    def can_undo(self) -> bool:
        return self._pointer > 0

    def can_redo(self) -> bool:
        return len(self._entries) > 0 and self._pointer < len(self._entries)

    def pointer(self) -> int:
        """Number of applied entries.

        Never exceeds the limit. A pointer of ``0`` does not mean the stack
        was never used: earlier entries may have been evicted. Check
        ``count()`` for that.
        """

        return self._pointer

    def count(self) -> int:
        """Effective depth: +1 per add and redo, -1 per undo.

        ``0`` means the stack is back at its initial depth. A positive
        count while ``pointer()`` is ``0`` means earlier entries were
        evicted and are gone.
        """

        return self._count

    def current(self) -> Optional[T]:
        if self._pointer == 0:
            return None
        return self._entries[self._pointer - 1]

    def last_purged(self) -> Optional[T]:
        return self._last_purged

    def get_limit(self) -> int:
        return self._limit

    def set_limit(self, new_limit: Optional[int]) -> None:
        """Change the capacity.

        A limit below the stored size keeps the oldest ``new_limit`` entries
        and clamps the pointer. Values below 1, ``UNBOUNDED`` included, are
        ignored; use ``remove_limit`` to lift the cap.
        """

        with span(
            "history::set_limit",
            logger_name=self._logger_name,
            component="history",
            metadata={"limit": self._limit, "requested": new_limit},
        ):
            if (
                not new_limit
                or isinstance(new_limit, bool)
                or not isinstance(new_limit, int)
                or new_limit < 1
            ):
                record_event(
                    "history::limit_ignored",
                    level="warning",
                    data={"requested": new_limit, "limit": self._limit},
                    logger_name=self._logger_name,
                )
                return

            self._limit = new_limit
            size = len(self._entries)
            if size > new_limit:
                del self._entries[new_limit:]
                self._pointer = min(self._pointer, new_limit)
                record_event(
                    "history::limit_trimmed",
                    level="info",
                    data={"dropped": size - new_limit, "limit": new_limit},
                    logger_name=self._logger_name,
                )

    def remove_limit(self) -> None:
        """Let the stack grow without bound; stored entries are kept."""

        with span(
            "history::remove_limit",
            logger_name=self._logger_name,
            component="history",
            metadata={"limit": self._limit},
        ):
            self._limit = UNBOUNDED

    def export_snapshot(self) -> Snapshot[T]:
        """Copy of the entry list plus the pointer; the entries are shared."""

        return Snapshot(entries=list(self._entries), pointer=self._pointer)

    def import_snapshot(self, snapshot: SnapshotLike) -> None:
        """Adopt ``snapshot`` as the stack contents.

        The snapshot's entry list is used directly, not copied. ``count()``
        and the last purged entry keep their current values.
        """

        with span(
            "history::import_snapshot",
            logger_name=self._logger_name,
            component="history",
        ) as handle:
            snapshot = ensure_snapshot(Snapshot.coerce(snapshot), limit=self._limit)
            handle.add_metadata("size", len(snapshot.entries))
            self._entries = snapshot.entries
            self._pointer = int(snapshot.pointer)

    def stats(self) -> StackStats:
        return StackStats(
            pointer=self._pointer,
            count=self._count,
            size=len(self._entries),
            limit=self._limit,
            can_undo=self.can_undo(),
            can_redo=self.can_redo(),
        )


def create(config: OptionsLike = None, **overrides: Any) -> HistoryStack[Any]:
    """Build an empty stack from ``StackOptions``, a dict, or keyword options."""

    return HistoryStack(config, **overrides)
