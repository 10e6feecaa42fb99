"""CHIP-8 machine assembly and fetch/execute orchestration."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from pychip8.audio import Audio, MockAudio
from pychip8.bus import FONT_START, ROM_START, Memory
from pychip8.cpu import CPU, Instruction
from pychip8.io import Keyboard, LatchKeyboard
from pychip8.utils import debug_enabled, debug_log
from pychip8.video import FONT_DATA, Display, FrameBuffer


@dataclass
class MachineConfig:
    """Runtime configuration for a CHIP-8 machine."""

    display: Optional[Display] = None
    keyboard: Optional[Keyboard] = None
    audio: Optional[Audio] = None
    rom_image: Optional[bytes] = None
    seed: Optional[int] = None


@dataclass
class Chip8Bus:
    """Memory plus the three host capabilities the CPU talks to."""

    memory: Memory
    display: Display
    keyboard: Keyboard
    audio: Audio


@dataclass
class Machine:
    """Owns the bus and the CPU; the driver calls ``step`` and ``tick_timers``."""

    cpu: CPU
    bus: Chip8Bus

    @property
    def memory(self) -> Memory:
        return self.bus.memory

    @property
    def display(self) -> Display:
        return self.bus.display

    @property
    def keyboard(self) -> Keyboard:
        return self.bus.keyboard

    @property
    def audio(self) -> Audio:
        return self.bus.audio

    def reset(self) -> None:
        """Reset registers, timers and the display and reload the font.

        Loaded program bytes above the font area are left as they are.
        """

        self.cpu.reset(self.bus.display)
        self.bus.memory.load_block(FONT_START, FONT_DATA)

    def load_rom(self, data: bytes) -> None:
        """Copy ``data`` to ``ROM_START``; the caller guarantees it fits."""

        self.bus.memory.load_block(ROM_START, data)
        if debug_enabled("cpu"):
            debug_log("cpu", "rom loaded bytes=%d end=%04x", len(data), ROM_START + len(data))

    def fetch(self) -> Instruction:
        pc = self.cpu.state.pc
        memory = self.bus.memory
        return Instruction.from_bytes(memory.load8(pc), memory.load8(pc + 1))

    def step(self) -> Instruction:
        """Run one fetch-decode-execute cycle and return the instruction."""

        instruction = self.fetch()
        self.cpu.execute(instruction, self.bus)
        return instruction

    def tick_timers(self) -> None:
        self.cpu.tick_timers(self.bus.audio)


def create_machine(config: MachineConfig | None = None) -> Machine:
    """Instantiate a CHIP-8 machine with the requested configuration."""

    config = config or MachineConfig()

    display = config.display if config.display is not None else FrameBuffer()
    keyboard = config.keyboard if config.keyboard is not None else LatchKeyboard()
    audio = config.audio if config.audio is not None else MockAudio()

    display.initialize()
    keyboard.initialize()
    audio.initialize()

    bus = Chip8Bus(memory=Memory(), display=display, keyboard=keyboard, audio=audio)
    cpu = CPU(rng=random.Random(config.seed))
    machine = Machine(cpu=cpu, bus=bus)
    machine.reset()

    if config.rom_image:
        machine.load_rom(config.rom_image)

    return machine
