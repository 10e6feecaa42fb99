"""Decoding of raw 16-bit CHIP-8 instruction words."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Instruction:
    """Structural fields of one instruction word.

    ``first`` selects the opcode family, ``nnn`` is a 12-bit address, ``kk`` an
    8-bit immediate, ``x``/``y`` register indices and ``n`` the low nibble.
    ``raw`` is kept for diagnostics.
    """

    raw: int
    first: int
    nnn: int
    kk: int
    x: int
    y: int
    n: int

    @classmethod
    def from_bytes(cls, high: int, low: int) -> "Instruction":
        return decode(((high & 0xFF) << 8) | (low & 0xFF))

    def __str__(self) -> str:
        return f"{self.raw:04X}"


def decode(raw: int) -> Instruction:
    """Split ``raw`` into its instruction fields."""

    raw &= 0xFFFF
    return Instruction(
        raw=raw,
        first=(raw >> 12) & 0xF,
        nnn=raw & 0xFFF,
        kk=raw & 0xFF,
        x=(raw >> 8) & 0xF,
        y=(raw >> 4) & 0xF,
        n=raw & 0xF,
    )
