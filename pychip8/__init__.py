"""Python CHIP-8 emulator.

The package hosts the CPU, memory, video, audio, input and UI layers used by
``run.py``. The core (``cpu``, ``bus``, ``system``) never touches pygame;
only the capability implementations in ``video``, ``audio`` and ``ui`` do,
and they import it lazily.
"""

from __future__ import annotations

from . import audio, bus, cpu, io, loader, system, ui, utils, video

__all__: list[str] = [
    "cpu",
    "bus",
    "video",
    "audio",
    "io",
    "loader",
    "system",
    "ui",
    "utils",
]
