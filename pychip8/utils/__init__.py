"""Utility helpers for the CHIP-8 emulator."""

from .debug import debug_categories, debug_enabled, debug_log, reload_categories
from .trace import TraceEntry, TraceRecorder

__all__ = [
    "debug_categories",
    "debug_enabled",
    "debug_log",
    "reload_categories",
    "TraceEntry",
    "TraceRecorder",
]
