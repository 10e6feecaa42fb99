"""Opcode metadata for the CHIP-8 instruction set."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable, List, Sequence

from .instruction import Instruction, decode


@dataclass(frozen=True)
class OpcodeSpec:
    """One row of the dispatch table.

    An instruction word matches when ``raw & mask == pattern``. ``mnemonic`` is
    a ``str.format`` template over the decoded fields.
    """

    mask: int
    pattern: int
    mnemonic: str
    handler: str
    advances_pc: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.mask <= 0xFFFF or not 0 <= self.pattern <= 0xFFFF:
            raise ValueError(f"opcode pattern out of range: {self.pattern:#06x}/{self.mask:#06x}")
        if self.pattern & ~self.mask:
            raise ValueError(f"pattern {self.pattern:#06x} has bits outside mask {self.mask:#06x}")
        if self.mask & 0xF000 != 0xF000:
            raise ValueError("mask must cover the opcode family nibble")

    @property
    def family(self) -> int:
        return self.pattern >> 12

    def matches(self, raw: int) -> bool:
        return raw & self.mask == self.pattern

    def format(self, instruction: Instruction) -> str:
        return self.mnemonic.format(
            x=instruction.x,
            y=instruction.y,
            n=instruction.n,
            kk=instruction.kk,
            nnn=instruction.nnn,
        )


class OpcodeTable:
    """Mutable builder for the per-family dispatch table."""

    _FAMILIES: Final[int] = 0x10

    def __init__(self) -> None:
        self._table: List[List[OpcodeSpec]] = [[] for _ in range(self._FAMILIES)]

    def register(self, spec: OpcodeSpec) -> None:
        bucket = self._table[spec.family]
        for existing in bucket:
            if existing.mask == spec.mask and existing.pattern == spec.pattern:
                raise ValueError(
                    f"opcode {spec.pattern:#06x} already registered as {existing.handler}")
        bucket.append(spec)

    def register_all(self, specs: Iterable[OpcodeSpec]) -> None:
        for spec in specs:
            self.register(spec)

    def freeze(self) -> Sequence[Sequence[OpcodeSpec]]:
        return tuple(tuple(bucket) for bucket in self._table)


def build_opcode_table(specs: Iterable[OpcodeSpec]) -> Sequence[Sequence[OpcodeSpec]]:
    """Build a 16-entry table of opcode rows keyed by family."""

    table = OpcodeTable()
    table.register_all(specs)
    return table.freeze()


DEFAULT_OPCODES: Sequence[OpcodeSpec] = (
    OpcodeSpec(0xFFFF, 0x00E0, "CLS", "op_cls"),
    OpcodeSpec(0xFFFF, 0x00EE, "RET", "op_ret", advances_pc=False),
    OpcodeSpec(0xF000, 0x1000, "JP {nnn:#05x}", "op_jp", advances_pc=False),
    OpcodeSpec(0xF000, 0x2000, "CALL {nnn:#05x}", "op_call", advances_pc=False),
    OpcodeSpec(0xF000, 0x3000, "SE V{x:X}, {kk:#04x}", "op_se_vx_byte"),
    OpcodeSpec(0xF000, 0x4000, "SNE V{x:X}, {kk:#04x}", "op_sne_vx_byte"),
    OpcodeSpec(0xF000, 0x6000, "LD V{x:X}, {kk:#04x}", "op_ld_vx_byte"),
    OpcodeSpec(0xF000, 0x7000, "ADD V{x:X}, {kk:#04x}", "op_add_vx_byte"),
    OpcodeSpec(0xF00F, 0x8000, "LD V{x:X}, V{y:X}", "op_ld_vx_vy"),
    OpcodeSpec(0xF00F, 0x8002, "AND V{x:X}, V{y:X}", "op_and_vx_vy"),
    OpcodeSpec(0xF00F, 0x8003, "XOR V{x:X}, V{y:X}", "op_xor_vx_vy"),
    OpcodeSpec(0xF00F, 0x8004, "ADD V{x:X}, V{y:X}", "op_add_vx_vy"),
    OpcodeSpec(0xF00F, 0x8005, "SUB V{x:X}, V{y:X}", "op_sub_vx_vy"),
    OpcodeSpec(0xF00F, 0x8006, "SHR V{x:X}", "op_shr_vx"),
    OpcodeSpec(0xF000, 0xA000, "LD I, {nnn:#05x}", "op_ld_i"),
    OpcodeSpec(0xF000, 0xC000, "RND V{x:X}, {kk:#04x}", "op_rnd"),
    OpcodeSpec(0xF000, 0xD000, "DRW V{x:X}, V{y:X}, {n:#03x}", "op_drw"),
    OpcodeSpec(0xF0FF, 0xE09E, "SKP V{x:X}", "op_skp"),
    OpcodeSpec(0xF0FF, 0xE0A1, "SKNP V{x:X}", "op_sknp"),
    OpcodeSpec(0xF0FF, 0xF007, "LD V{x:X}, DT", "op_ld_vx_dt"),
    OpcodeSpec(0xF0FF, 0xF00A, "LD V{x:X}, K", "op_ld_vx_k"),
    OpcodeSpec(0xF0FF, 0xF015, "LD DT, V{x:X}", "op_ld_dt_vx"),
    OpcodeSpec(0xF0FF, 0xF018, "LD ST, V{x:X}", "op_ld_st_vx"),
    OpcodeSpec(0xF0FF, 0xF01E, "ADD I, V{x:X}", "op_add_i_vx"),
    OpcodeSpec(0xF0FF, 0xF029, "LD F, V{x:X}", "op_ld_f_vx"),
    OpcodeSpec(0xF0FF, 0xF033, "LD B, V{x:X}", "op_ld_b_vx"),
    OpcodeSpec(0xF0FF, 0xF055, "LD [I], V{x:X}", "op_ld_mem_vx"),
    OpcodeSpec(0xF0FF, 0xF065, "LD V{x:X}, [I]", "op_ld_vx_mem"),
)


OPCODE_TABLE: Sequence[Sequence[OpcodeSpec]] = build_opcode_table(DEFAULT_OPCODES)


def lookup(raw: int, table: Sequence[Sequence[OpcodeSpec]] = OPCODE_TABLE) -> OpcodeSpec | None:
    """Return the table row matching ``raw`` or ``None``."""

    raw &= 0xFFFF
    for spec in table[raw >> 12]:
        if spec.matches(raw):
            return spec
    return None


def disassemble(raw: int, table: Sequence[Sequence[OpcodeSpec]] = OPCODE_TABLE) -> str:
    spec = lookup(raw, table)
    if spec is None:
        return "???"
    return spec.format(decode(raw))
