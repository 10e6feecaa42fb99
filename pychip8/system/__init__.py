"""CHIP-8 system assembly helpers."""

from __future__ import annotations

from .machine import Chip8Bus, Machine, MachineConfig, create_machine

__all__ = [
    "Chip8Bus",
    "MachineConfig",
    "Machine",
    "create_machine",
]
