"""Construction options for history stacks."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Optional

UNBOUNDED = -1

Callback = Callable[[Any], None]

_ALIASES = {
    "limit": "limit",
    "on_undo": "on_undo",
    "onUndo": "on_undo",
    "on_redo": "on_redo",
    "onRedo": "on_redo",
    "logger_name": "logger_name",
}


@dataclass(slots=True)
class StackOptions:
    """Capacity limit, undo/redo observers and logger routing for a stack.

    A falsy ``limit`` (``None`` or ``0``) means unbounded, same as passing
    ``UNBOUNDED`` explicitly.
    """

    limit: Optional[int] = UNBOUNDED
    on_undo: Optional[Callback] = None
    on_redo: Optional[Callback] = None
    logger_name: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.limit:
            self.limit = UNBOUNDED
        if isinstance(self.limit, bool) or not isinstance(self.limit, int):
            raise ValueError(f"limit must be an integer, got {self.limit!r}")
        if self.limit < UNBOUNDED:
            raise ValueError(
                f"limit must be {UNBOUNDED} (unbounded) or >= 1, got {self.limit}"
            )
        for name in ("on_undo", "on_redo"):
            callback = getattr(self, name)
            if callback is not None and not callable(callback):
                raise TypeError(f"{name} must be callable, got {callback!r}")

    @property
    def bounded(self) -> bool:
        return self.limit != UNBOUNDED

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StackOptions":
        """Build options from a plain dict; camelCase callback keys are accepted."""

        return cls(**_normalize_keys(data))

    def with_overrides(self, overrides: Mapping[str, Any]) -> "StackOptions":
        """Return a copy with ``overrides`` applied and re-validated."""

        if not overrides:
            return self
        return replace(self, **_normalize_keys(overrides))


def _normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in data.items():
        try:
            normalized[_ALIASES[key]] = value
        except KeyError as exc:
            raise ValueError(f"Unknown stack option '{key}'") from exc
    return normalized
