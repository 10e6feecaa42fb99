"""Pygame host driver for the CHIP-8 emulator."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from pychip8.audio import SquareWaveBeeper
from pychip8.cpu import UnknownInstructionError
from pychip8.cpu.opcodes import disassemble
from pychip8.io import KeypadKeyboard
from pychip8.loader import RomFormatError, read_rom
from pychip8.system import Machine, MachineConfig, create_machine
from pychip8.utils import TraceRecorder, debug_enabled, debug_log
from pychip8.video import FrameBuffer, PygameDisplay

FRAME_RATE = 60
TRACE_CAPACITY = 512
SHELL_HELP = "keys: <Enter> resume, c cpu, s screen, m [addr] [len] memory, t trace, q quit"


@dataclass
class AppConfig:
    """Options collected by ``run.py``."""

    rom_path: Optional[Path] = None
    scale: int = 10
    fullscreen: bool = False
    cycles_per_frame: int = 10
    seed: Optional[int] = None


class Chip8App:
    """Owns the pygame window and drives one machine at 60 frames per second.

    Each frame runs ``cycles_per_frame`` instructions, ticks both timers
    once and presents the screen. Escape pauses into a stdin debug shell.
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._running = False
        self._machine: Machine | None = None
        self._display: PygameDisplay | None = None
        self._keyboard: KeypadKeyboard | None = None
        self._beeper: SquareWaveBeeper | None = None
        self._frames = 0
        self._perf = debug_enabled("perf")
        self._trace_recorder = TraceRecorder(TRACE_CAPACITY) if debug_enabled("trace") else None

    @property
    def machine(self) -> Machine | None:
        return self._machine

    @property
    def frames(self) -> int:
        return self._frames

    def run(self) -> None:
        try:
            import pygame  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pygame is required to run the emulator window") from exc

        if self._config.rom_path is None:
            raise RuntimeError("no ROM given; pass --rom <path>")
        try:
            rom = read_rom(self._config.rom_path)
        except RomFormatError as exc:
            raise RuntimeError(str(exc)) from exc

        # mono 16-bit mixer, matching the beeper's sample format
        pygame.mixer.pre_init(44_100, -16, 1, 512)
        pygame.init()
        machine = self._machine = self._create_machine(pygame, rom)
        clock = pygame.time.Clock()

        self._running = True
        try:
            while self._running:
                self._pump_events(pygame, machine)
                if not self._running:
                    break
                self._run_frame(machine)
                clock.tick(FRAME_RATE)
        finally:
            if self._beeper is not None:
                self._beeper.shutdown()
            pygame.quit()

    def _create_machine(self, pygame, rom: bytes) -> Machine:
        self._display = PygameDisplay(
            scale=self._config.scale,
            fullscreen=self._config.fullscreen,
            pygame_module=pygame,
        )
        self._keyboard = KeypadKeyboard()
        self._beeper = None
        if pygame.mixer.get_init() is not None:
            self._beeper = SquareWaveBeeper(pygame_module=pygame)
        elif debug_enabled("audio"):
            debug_log("audio", "mixer unavailable, running silent")

        return create_machine(
            MachineConfig(
                display=self._display,
                keyboard=self._keyboard,
                audio=self._beeper,
                rom_image=rom,
                seed=self._config.seed,
            )
        )

    def _pump_events(self, pygame, machine: Machine) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._enter_debug_shell(machine)
                else:
                    self._handle_key_event(pygame, event.key, pressed=True)
            elif event.type == pygame.KEYUP:
                self._handle_key_event(pygame, event.key, pressed=False)

    def _run_frame(self, machine: Machine) -> None:
        started = time.perf_counter()
        self._step_cpu(machine)
        machine.tick_timers()
        if self._display is not None:
            self._display.present()
        self._frames += 1

        if self._perf:
            elapsed_ms = (time.perf_counter() - started) * 1000.0
            debug_log(
                "perf",
                "frame=%d cycles=%d elapsed_ms=%.3f",
                self._frames,
                self._config.cycles_per_frame,
                elapsed_ms,
            )

    def _step_cpu(self, machine: Machine) -> None:
        recorder = self._trace_recorder
        try:
            for _ in range(self._config.cycles_per_frame):
                if recorder is not None:
                    raw = machine.fetch().raw
                    recorder.record_step(machine.cpu.state, raw, mnemonic=disassemble(raw))
                machine.step()
        except UnknownInstructionError as exc:
            self._running = False
            if recorder is not None:
                recorder.dump("trace", limit=32)
            raise RuntimeError(f"Unknown instruction encountered: {exc}") from exc

    def _handle_key_event(self, pygame, key_code: int, *, pressed: bool) -> None:
        if self._keyboard is None:
            return
        key_name = pygame.key.name(key_code)
        if debug_enabled("input"):
            debug_log("input", "host key=%s down=%s", key_name, pressed)
        if pressed:
            self._keyboard.press(key_name)
        else:
            self._keyboard.release(key_name)

    # ------------------------------------------------------------------
    # Debug shell

    def _enter_debug_shell(self, machine: Machine) -> None:
        """Block on stdin until the user resumes or quits."""

        commands: dict[str, Callable[[str], None]] = {
            "c": lambda _: self._dump_cpu(machine),
            "s": lambda _: self._dump_screen(machine),
            "m": lambda args: self._dump_memory(machine, args),
            "t": lambda _: self._dump_trace(),
        }
        print("\n-- paused --")
        print(SHELL_HELP)
        while self._running:
            try:
                line = input("chip8> ").strip().lower()
            except (EOFError, KeyboardInterrupt):
                line = ""
            if not line:
                print("-- resumed --")
                return
            if line in {"q", "quit"}:
                print("-- quit --")
                self._running = False
                return
            handler = commands.get(line[0])
            if handler is None:
                print(SHELL_HELP)
            else:
                handler(line[1:].strip())

    def _dump_cpu(self, machine: Machine) -> None:
        state = machine.cpu.state
        print(
            f"PC={state.pc:03X} I={state.i:03X} SP={state.sp:X} "
            f"DT={state.delay_timer:02X} ST={state.sound_timer:02X}"
        )
        print(" ".join(f"V{index:X}={value:02X}" for index, value in enumerate(state.v)))
        frames = " ".join(f"{address:03X}" for address in state.stack[: state.sp]) or "empty"
        print(f"stack: {frames}")
        print(f"next:  {disassemble(machine.fetch().raw)}")

    def _dump_screen(self, machine: Machine) -> None:
        display = machine.display
        if isinstance(display, PygameDisplay):
            display = display.framebuffer
        if not isinstance(display, FrameBuffer):
            print("screen contents are not readable from this display")
            return
        print("\n".join(display.rows()))

    def _dump_trace(self, limit: int = 64) -> None:
        if self._trace_recorder is None:
            print("tracing is off; run with CHIP8_DEBUG=trace")
            return
        lines = self._trace_recorder.format_entries(limit)
        print("\n".join(lines) if lines else "trace is empty")

    def _dump_memory(self, machine: Machine, args: str = "") -> None:
        fields = args.split()
        try:
            start = int(fields[0], 16) if fields else 0x200
            length = int(fields[1]) if len(fields) > 1 else 0x80
            if start < 0:
                raise ValueError(start)
        except ValueError:
            print("m [start address in hex] [byte count]")
            return

        memory = machine.memory
        end = min(start + max(length, 0), len(memory))
        for row in range(start, end, 16):
            values = memory.read_block(row, min(16, end - row))
            print(f"{row:03X}: " + " ".join(f"{value:02X}" for value in values))
