"""CHIP-8 CPU: register file, timers and instruction execution."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence

from pychip8.utils import debug_enabled, debug_log

from .instruction import Instruction
from .opcodes import OPCODE_TABLE, OpcodeSpec, lookup

if TYPE_CHECKING:
    from pychip8.audio import Audio
    from pychip8.system.machine import Chip8Bus
    from pychip8.video import Display


class CPUError(Exception):
    """Base error for CPU-related failures."""


class UnknownInstructionError(CPUError):
    """Raised when an instruction word matches no dispatch table entry."""

    def __init__(self, raw_opcode: int) -> None:
        self.raw_opcode = raw_opcode & 0xFFFF
        super().__init__(f"unknown instruction {self.raw_opcode:#06x}")


REGISTER_COUNT = 16
STACK_DEPTH = 16
PROGRAM_START = 0x200
FLAG_REGISTER = 0xF
FONT_GLYPH_BYTES = 5


@dataclass
class CPUState:
    """Snapshot of the CHIP-8 register file."""

    v: bytearray = field(default_factory=lambda: bytearray(REGISTER_COUNT))
    i: int = 0x000
    pc: int = PROGRAM_START
    sp: int = 0
    stack: list[int] = field(default_factory=lambda: [0] * STACK_DEPTH)
    delay_timer: int = 0
    sound_timer: int = 0

    def clone(self) -> "CPUState":
        return CPUState(
            bytearray(self.v),
            self.i,
            self.pc,
            self.sp,
            list(self.stack),
            self.delay_timer,
            self.sound_timer,
        )


@dataclass
class CPU:
    """Fetch-free execution engine.

    The machine fetches and decodes; ``execute`` applies one instruction to
    the register file and the bus. The CPU never schedules anything itself.
    """

    opcode_table: Sequence[Sequence[OpcodeSpec]] = field(default=OPCODE_TABLE)
    rng: random.Random = field(default_factory=random.Random)

    # rendering hint forwarded with every pixel write
    PIXEL_HINT: float = 1.0

    state: CPUState = field(default_factory=CPUState)
    instruction_count: int = 0

    def reset(self, display: "Display") -> None:
        """Clear registers, stack and timers, and blank the display."""

        self.state = CPUState()
        self.instruction_count = 0
        display.clear()

    def execute(self, instruction: Instruction, bus: "Chip8Bus") -> None:
        """Execute ``instruction`` and advance the program counter."""

        spec = lookup(instruction.raw, self.opcode_table)
        if spec is None:
            raise UnknownInstructionError(instruction.raw)
        handler = getattr(self, spec.handler, None)
        if handler is None:
            raise CPUError(f"handler '{spec.handler}' not implemented")

        if debug_enabled("cpu"):
            debug_log("cpu", "pc=%04x %04x %s", self.state.pc, instruction.raw, spec.format(instruction))

        handler(instruction, bus)
        if spec.advances_pc:
            self.state.pc = (self.state.pc + 2) & 0xFFFF
        self.instruction_count += 1

    def tick_timers(self, audio: "Audio") -> None:
        """Count both timers down once and drive the tone from the sound timer."""

        state = self.state
        if state.delay_timer > 0:
            state.delay_timer -= 1
        if state.sound_timer > 0:
            state.sound_timer -= 1
        if state.sound_timer > 0:
            audio.start_sound()
        else:
            audio.stop_sound()
        if debug_enabled("timer"):
            debug_log("timer", "dt=%d st=%d", state.delay_timer, state.sound_timer)

    # ------------------------------------------------------------------
    # Flow control

    def op_cls(self, _: Instruction, bus: "Chip8Bus") -> None:
        bus.display.clear()

    def op_ret(self, _: Instruction, bus: "Chip8Bus") -> None:
        state = self.state
        state.sp -= 1
        state.pc = state.stack[state.sp]

    def op_jp(self, instruction: Instruction, _: "Chip8Bus") -> None:
        self.state.pc = instruction.nnn

    def op_call(self, instruction: Instruction, _: "Chip8Bus") -> None:
        state = self.state
        state.stack[state.sp] = (state.pc + 2) & 0xFFFF
        state.sp += 1
        state.pc = instruction.nnn

    def op_se_vx_byte(self, instruction: Instruction, _: "Chip8Bus") -> None:
        if self.state.v[instruction.x] == instruction.kk:
            self._skip()

    def op_sne_vx_byte(self, instruction: Instruction, _: "Chip8Bus") -> None:
        if self.state.v[instruction.x] != instruction.kk:
            self._skip()

    def op_skp(self, instruction: Instruction, bus: "Chip8Bus") -> None:
        if bus.keyboard.get_key() == self.state.v[instruction.x]:
            self._skip()

    def op_sknp(self, instruction: Instruction, bus: "Chip8Bus") -> None:
        if bus.keyboard.get_key() != self.state.v[instruction.x]:
            self._skip()

    # ------------------------------------------------------------------
    # Register arithmetic

    def op_ld_vx_byte(self, instruction: Instruction, _: "Chip8Bus") -> None:
        self.state.v[instruction.x] = instruction.kk

    def op_add_vx_byte(self, instruction: Instruction, _: "Chip8Bus") -> None:
        v = self.state.v
        v[instruction.x] = (v[instruction.x] + instruction.kk) & 0xFF

    def op_ld_vx_vy(self, instruction: Instruction, _: "Chip8Bus") -> None:
        v = self.state.v
        v[instruction.x] = v[instruction.y]

    def op_and_vx_vy(self, instruction: Instruction, _: "Chip8Bus") -> None:
        v = self.state.v
        v[instruction.x] &= v[instruction.y]

    def op_xor_vx_vy(self, instruction: Instruction, _: "Chip8Bus") -> None:
        v = self.state.v
        v[instruction.x] ^= v[instruction.y]

    def op_add_vx_vy(self, instruction: Instruction, _: "Chip8Bus") -> None:
        v = self.state.v
        total = v[instruction.x] + v[instruction.y]
        v[FLAG_REGISTER] = 1 if total > 0xFF else 0
        v[instruction.x] = total & 0xFF

    def op_sub_vx_vy(self, instruction: Instruction, _: "Chip8Bus") -> None:
        v = self.state.v
        vx = v[instruction.x]
        vy = v[instruction.y]
        v[FLAG_REGISTER] = 1 if vx > vy else 0
        v[instruction.x] = (vx - vy) & 0xFF

    def op_shr_vx(self, instruction: Instruction, _: "Chip8Bus") -> None:
        v = self.state.v
        vx = v[instruction.x]
        v[FLAG_REGISTER] = vx & 0x01
        v[instruction.x] = vx >> 1

    def op_rnd(self, instruction: Instruction, _: "Chip8Bus") -> None:
        self.state.v[instruction.x] = self.rng.randrange(0x100) & instruction.kk

    # ------------------------------------------------------------------
    # Index register and memory

    def op_ld_i(self, instruction: Instruction, _: "Chip8Bus") -> None:
        self.state.i = instruction.nnn

    def op_add_i_vx(self, instruction: Instruction, _: "Chip8Bus") -> None:
        state = self.state
        state.i = (state.i + state.v[instruction.x]) & 0xFFFF

    def op_ld_f_vx(self, instruction: Instruction, _: "Chip8Bus") -> None:
        self.state.i = (self.state.v[instruction.x] * FONT_GLYPH_BYTES) & 0xFFFF

    def op_ld_b_vx(self, instruction: Instruction, bus: "Chip8Bus") -> None:
        value = self.state.v[instruction.x]
        address = self.state.i
        memory = bus.memory
        memory.store8(address, value // 100)
        memory.store8(address + 1, value % 100 // 10)
        memory.store8(address + 2, value % 10)

    def op_ld_mem_vx(self, instruction: Instruction, bus: "Chip8Bus") -> None:
        state = self.state
        for index in range(instruction.x + 1):
            bus.memory.store8(state.i + index, state.v[index])

    def op_ld_vx_mem(self, instruction: Instruction, bus: "Chip8Bus") -> None:
        state = self.state
        for index in range(instruction.x + 1):
            state.v[index] = bus.memory.load8(state.i + index)

    # ------------------------------------------------------------------
    # Timers and input

    def op_ld_vx_dt(self, instruction: Instruction, _: "Chip8Bus") -> None:
        self.state.v[instruction.x] = self.state.delay_timer

    def op_ld_dt_vx(self, instruction: Instruction, _: "Chip8Bus") -> None:
        self.state.delay_timer = self.state.v[instruction.x]

    def op_ld_st_vx(self, instruction: Instruction, _: "Chip8Bus") -> None:
        self.state.sound_timer = self.state.v[instruction.x]

    def op_ld_vx_k(self, instruction: Instruction, bus: "Chip8Bus") -> None:
        key = bus.keyboard.get_key()
        if key == 0:
            # rewind so the common advance lands on this instruction again
            self.state.pc = (self.state.pc - 2) & 0xFFFF
            if debug_enabled("input"):
                debug_log("input", "waiting for key pc=%04x", self.state.pc)
            return
        self.state.v[instruction.x] = key & 0xFF

    # ------------------------------------------------------------------
    # Graphics

    def op_drw(self, instruction: Instruction, bus: "Chip8Bus") -> None:
        state = self.state
        display = bus.display
        width = display.get_width()
        height = display.get_height()
        origin_x = state.v[instruction.x]
        origin_y = state.v[instruction.y]

        state.v[FLAG_REGISTER] = 0
        for row in range(instruction.n):
            y = origin_y + row
            if y >= height:
                break
            sprite = bus.memory.load8(state.i + row)
            for col in range(8):
                if not sprite & (0x80 >> col):
                    continue
                x = origin_x + col
                if x >= width:
                    break
                lit = display.get_pixel(x, y)
                if lit:
                    state.v[FLAG_REGISTER] = 1
                display.draw_pixel(x, y, self.PIXEL_HINT, not lit)

    # ------------------------------------------------------------------
    # Helpers

    def _skip(self) -> None:
        self.state.pc = (self.state.pc + 2) & 0xFFFF
