"""Memory image for the CHIP-8 emulator.

The interpreter sees a flat 4096-byte address space. The low 512 bytes are
reserved for the interpreter itself (only the font glyphs live there) and
programs are loaded at ``ROM_START``. Addresses are not range-checked here: an
out-of-range access is a program defect and surfaces as Python's own
``IndexError``.
"""

from __future__ import annotations

from typing import Iterable

MEMORY_SIZE = 0x1000
FONT_START = 0x000
ROM_START = 0x200


class Memory:
    """Simple byte-addressable 4 KiB memory."""

    def __init__(self, size: int = MEMORY_SIZE) -> None:
        if size <= 0:
            raise ValueError("memory size must be positive")
        self._data = bytearray(size)

    def __len__(self) -> int:
        return len(self._data)

    def load8(self, address: int) -> int:
        return self._data[address]

    def store8(self, address: int, value: int) -> None:
        self._data[address] = value & 0xFF

    def load16(self, address: int) -> int:
        high = self._data[address]
        low = self._data[address + 1]
        return (high << 8) | low

    def load_block(self, address: int, data: Iterable[int]) -> None:
        payload = bytes(data)
        # memoryview keeps the image at a fixed size; an oversized block raises
        view = memoryview(self._data)
        view[address : address + len(payload)] = payload

    def read_block(self, address: int, length: int) -> bytes:
        return bytes(self._data[address : address + length])

    def snapshot(self) -> bytes:
        return bytes(self._data)

    def clear(self) -> None:
        self._data[:] = bytes(len(self._data))
