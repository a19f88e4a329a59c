"""Logging and profiling for history stacks, backed by telelog.

Stacks only use ``span`` (profile + component tracking around a mutation)
and ``record_event`` (one structured line). ``configure`` swaps the active
telelog config; by default it is built from ``HISTORY_STACK_*`` variables.
"""

from __future__ import annotations

import os
from contextlib import ExitStack
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "HISTORY_STACK_"
_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class TelemetrySettings:
    """Plain description of a telelog config, before it is built."""

    level: str = "INFO"
    console: bool = True
    colored: bool = True
    json: bool = False
    log_file: str = ""
    buffered: bool = False
    buffer_size: int = 2048
    logger_name: str = "history_stack"

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "TelemetrySettings":
        env = os.environ if environ is None else environ

        def read(name: str) -> Optional[str]:
            return env.get(ENV_PREFIX + name)

        def flag(name: str) -> bool:
            return (read(name) or "").strip().lower() in _TRUTHY

        defaults = cls()
        return cls(
            level=(read("LOG_LEVEL") or defaults.level).upper(),
            console=not flag("DISABLE_CONSOLE"),
            colored=not flag("NO_COLOR"),
            json=flag("LOG_JSON"),
            log_file=read("LOG_FILE") or "",
            buffered=flag("LOG_BUFFERED"),
            buffer_size=int(read("LOG_BUFFER_SIZE") or defaults.buffer_size),
            logger_name=read("LOGGER") or defaults.logger_name,
        )

    def build(self) -> Any:
        config = tl.Config()
        config.with_min_level(self.level)
        config.with_console_output(self.console)
        if self.console:
            config.with_colored_output(self.colored)
        config.with_json_format(self.json)
        if self.log_file:
            config.with_file_output(self.log_file)
        if self.buffered:
            config.with_buffering(True)
            config.with_buffer_size(self.buffer_size)
        # span() relies on logger.profile, which only reports with profiling on.
        config.with_profiling(True)
        return config


_PRESETS: Dict[str, Dict[str, Any]] = {
    "development": {
        "level": "DEBUG",
        "console": True,
        "colored": True,
        "json": False,
    },
    "production": {
        "level": "INFO",
        "console": False,
        "buffered": True,
        "log_file": "history_stack.log",
    },
    "performance": {
        "level": "DEBUG",
        "console": False,
        "json": True,
        "buffered": True,
        "log_file": "history_stack-performance.log",
    },
}
_PRESETS["performance_analysis"] = _PRESETS["performance"]

_active_config: Optional[Any] = None
_settings = TelemetrySettings.from_env()


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Replace the active telelog configuration.

    ``config`` is an already built ``telelog.Config``. ``preset`` names one
    of ``development``, ``production`` or ``performance``; a preset keeps
    ``HISTORY_STACK_LOG_FILE`` when it is set. With neither argument the
    environment is read again.
    """

    global _active_config, _settings
    if config is not None and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")

    settings = TelemetrySettings.from_env()
    if preset:
        overrides = _PRESETS.get(preset.lower())
        if overrides is None:
            raise ValueError(f"Unknown preset '{preset}'.")
        preset_settings = replace(settings, **overrides)
        if settings.log_file:
            preset_settings = replace(preset_settings, log_file=settings.log_file)
        settings = preset_settings

    if config is None:
        config = settings.build()
    else:
        config.with_profiling(True)

    _settings = settings
    _active_config = config
    _logger_for.cache_clear()


@lru_cache(maxsize=None)
def _logger_for(name: str) -> Any:
    return tl.Logger.with_config(name, _active_config)


def get_logger(name: Optional[str] = None) -> Any:
    """Return the telelog logger for ``name``, one instance per config."""

    if _active_config is None:
        configure()
    return _logger_for(name or _settings.logger_name)


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def _write(logger: Any, level: str, message: str, fields: Dict[str, Any]) -> None:
    level = level.lower()
    structured = getattr(logger, f"{level}_with", None)
    if structured is not None:
        structured(message, [(str(k), _text(v)) for k, v in fields.items()])
        return
    plain = getattr(logger, level, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {fields}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log ``event::<name>`` with ``data`` as structured fields."""

    fields = {"event": name, **(data or {})}
    _write(get_logger(logger_name), level, f"event::{name}", fields)


@dataclass
class Span:
    """Context manager returned by ``span``; usable as its own handle."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    _context_keys: Tuple[str, ...] = ()
    _stack: Optional[ExitStack] = None

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        fields: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component_name:
            fields["component"] = self.component_name
        fields["reason"] = reason
        _write(self.logger, "error", "span::fail", fields)

    def __enter__(self) -> "Span":
        for key in self._context_keys:
            self.logger.add_context(key, self.metadata[key])
        stack = ExitStack()
        try:
            if self.component_name:
                tracker = self.logger.track_component(self.component_name)
                stack.enter_context(tracker)
            stack.enter_context(self.logger.profile(self.span_name))
        except BaseException:
            stack.close()
            self._drop_context()
            raise
        self._stack = stack
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc is not None and isinstance(exc, Exception):
                self.fail(str(exc))
        finally:
            stack, self._stack = self._stack, None
            try:
                if stack is not None:
                    stack.__exit__(exc_type, exc, tb)
            finally:
                self._drop_context()
        return False

    def _drop_context(self) -> None:
        for key in self._context_keys:
            self.logger.remove_context(key)


def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Span:
    """Profile a block, optionally tracking it as a component.

    ``component=True`` reuses ``name`` as the component id. ``metadata``
    is attached as logger context only while the block runs. An exception
    leaving the block is logged as ``span::fail`` and propagates.
    """

    context = {key: _text(value) for key, value in (metadata or {}).items()}
    return Span(
        logger=get_logger(logger_name),
        span_name=name,
        component_name=name if component is True else (component or None),
        metadata=context,
        _context_keys=tuple(context),
    )


__all__ = [
    "Span",
    "TelemetrySettings",
    "configure",
    "get_logger",
    "record_event",
    "span",
]
