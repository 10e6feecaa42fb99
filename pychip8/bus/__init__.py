"""Bus-related helpers for the CHIP-8 emulator."""

from .memory import FONT_START, MEMORY_SIZE, ROM_START, Memory

__all__ = [
    "Memory",
    "MEMORY_SIZE",
    "FONT_START",
    "ROM_START",
]
