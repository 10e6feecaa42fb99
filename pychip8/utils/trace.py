"""Ring buffer of recent CPU snapshots, dumped when a run goes wrong."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterator

from .debug import debug_log


@dataclass(frozen=True)
class TraceEntry:
    pc: int
    opcode: int | None
    mnemonic: str
    v: tuple[int, ...]
    i: int
    sp: int
    delay_timer: int
    sound_timer: int
    note: str = ""

    @classmethod
    def capture(cls, state, opcode: int | None, mnemonic: str = "", note: str = "") -> "TraceEntry":
        """Copy the interesting parts of a ``CPUState``-like object."""

        return cls(
            pc=state.pc & 0xFFFF,
            opcode=None if opcode is None else opcode & 0xFFFF,
            mnemonic=mnemonic,
            v=tuple(value & 0xFF for value in state.v),
            i=state.i & 0xFFFF,
            sp=state.sp,
            delay_timer=state.delay_timer,
            sound_timer=state.sound_timer,
            note=note,
        )

    def format(self) -> str:
        opcode = "????" if self.opcode is None else f"{self.opcode:04X}"
        registers = "".join(f"{value:02X}" for value in self.v)
        line = (
            f"{self.pc:04X}  {opcode}  {self.mnemonic or '?':<18} V={registers} "
            f"I={self.i:03X} SP={self.sp:X} DT={self.delay_timer:02X} ST={self.sound_timer:02X}"
        )
        if self.note:
            line += f"  ; {self.note}"
        return line


class TraceRecorder:
    """Keeps the last ``capacity`` executed steps."""

    def __init__(self, capacity: int = 256) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._entries: deque[TraceEntry] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def record_step(self, cpu_state, opcode: int | None, *, mnemonic: str = "", note: str = "") -> None:
        self._entries.append(TraceEntry.capture(cpu_state, opcode, mnemonic, note))

    def entries(self, limit: int | None = None) -> Iterator[TraceEntry]:
        """Yield the newest ``limit`` entries, oldest first."""

        skip = 0 if limit is None else max(len(self._entries) - max(limit, 0), 0)
        for index, entry in enumerate(self._entries):
            if index >= skip:
                yield entry

    def last_entry(self) -> TraceEntry | None:
        return self._entries[-1] if self._entries else None

    def format_entries(self, limit: int | None = None) -> list[str]:
        return [entry.format() for entry in self.entries(limit)]

    def dump(self, category: str, limit: int | None = None) -> None:
        for line in self.format_entries(limit):
            debug_log(category, line)

    def clear(self) -> None:
        self._entries.clear()
