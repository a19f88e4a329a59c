"""Runtime services (logging, profiling) shared by the stack package."""

from . import telemetry

__all__ = ["telemetry"]
