"""Loading CHIP-8 program images from disk."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pychip8.bus import MEMORY_SIZE, ROM_START
from pychip8.utils import debug_enabled, debug_log

if TYPE_CHECKING:
    from pychip8.system import Machine

MAX_ROM_SIZE = MEMORY_SIZE - ROM_START


class RomFormatError(RuntimeError):
    """Raised when a ROM image cannot be loaded."""


def validate_rom(data: bytes) -> bytes:
    """Return ``data`` unchanged if it fits the program area."""

    if not data:
        raise RomFormatError("ROM image is empty")
    if len(data) > MAX_ROM_SIZE:
        raise RomFormatError(
            f"ROM image is {len(data)} bytes; at most {MAX_ROM_SIZE} fit above {ROM_START:#05x}")
    return bytes(data)


def read_rom(path: Path | str) -> bytes:
    path = Path(path)
    try:
        data = path.read_bytes()
    except FileNotFoundError as exc:
        raise RomFormatError(f"ROM file not found: {path}") from exc
    except OSError as exc:
        raise RomFormatError(f"cannot read ROM {path}: {exc}") from exc
    return validate_rom(data)


def load_rom_from_path(path: Path | str, machine: "Machine") -> int:
    """Load the ROM at ``path`` into ``machine`` and return its size."""

    data = read_rom(path)
    machine.load_rom(data)
    if debug_enabled("loader"):
        debug_log("loader", "path=%s bytes=%d", path, len(data))
    return len(data)
