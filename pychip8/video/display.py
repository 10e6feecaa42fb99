"""Display capability and in-memory implementations."""

from __future__ import annotations

from typing import Protocol

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32


class Display(Protocol):
    """Monochrome bitmap the CPU draws sprites onto."""

    def initialize(self) -> None:
        ...

    def clear(self) -> None:
        ...

    def get_width(self) -> int:
        ...

    def get_height(self) -> int:
        ...

    def draw_pixel(self, x: int, y: int, hint: float, on: bool) -> None:
        ...

    def get_pixel(self, x: int, y: int) -> bool:
        ...


class FrameBuffer:
    """Plain 64x32 bitmap, used directly by tests and wrapped by renderers."""

    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("display dimensions must be positive")
        self._width = width
        self._height = height
        self._pixels = bytearray(width * height)

    def initialize(self) -> None:
        self.clear()

    def clear(self) -> None:
        self._pixels[:] = bytes(len(self._pixels))

    def get_width(self) -> int:
        return self._width

    def get_height(self) -> int:
        return self._height

    def draw_pixel(self, x: int, y: int, hint: float, on: bool) -> None:
        self._pixels[y * self._width + x] = 1 if on else 0

    def get_pixel(self, x: int, y: int) -> bool:
        return self._pixels[y * self._width + x] == 1

    def lit_pixels(self) -> list[tuple[int, int]]:
        width = self._width
        return [(index % width, index // width) for index, value in enumerate(self._pixels) if value]

    def rows(self) -> list[str]:
        """Return the bitmap as ``#``/``.`` strings, one per row."""

        width = self._width
        return [
            "".join("#" if self._pixels[y * width + x] else "." for x in range(width))
            for y in range(self._height)
        ]


class NullDisplay:
    """Display that keeps no bitmap and only remembers being cleared."""

    def __init__(self) -> None:
        self.cleared = False

    def initialize(self) -> None:
        self.cleared = False

    def clear(self) -> None:
        self.cleared = True

    def get_width(self) -> int:
        return DISPLAY_WIDTH

    def get_height(self) -> int:
        return DISPLAY_HEIGHT

    def draw_pixel(self, x: int, y: int, hint: float, on: bool) -> None:  # noqa: D401 - intentionally empty
        """Discard pixel writes."""

    def get_pixel(self, x: int, y: int) -> bool:
        return False
