"""CPU package for the CHIP-8 emulator."""

from .core import CPU, CPUError, CPUState, UnknownInstructionError
from .instruction import Instruction, decode
from . import opcodes

__all__ = [
    "CPU",
    "CPUState",
    "CPUError",
    "UnknownInstructionError",
    "Instruction",
    "decode",
    "opcodes",
]
