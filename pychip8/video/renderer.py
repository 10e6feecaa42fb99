"""Pygame-backed display for the CHIP-8 emulator."""

from __future__ import annotations

from typing import Sequence, Tuple

from pychip8.utils import debug_enabled, debug_log

from .display import DISPLAY_HEIGHT, DISPLAY_WIDTH, FrameBuffer

RGBColor = Tuple[int, int, int]

MONOCHROME: Tuple[RGBColor, RGBColor] = ((0, 0, 0), (0xFF, 0xFF, 0xFF))


def validate_palette(palette: Sequence[RGBColor]) -> Tuple[RGBColor, RGBColor]:
    if len(palette) != 2:
        raise ValueError("palette must contain exactly two colours (background and foreground)")
    if any(len(color) != 3 for color in palette):
        raise ValueError("palette entries must be RGB tuples")
    return tuple(tuple(int(channel) & 0xFF for channel in color) for color in palette)  # type: ignore[return-value]


class PygameDisplay:
    """Mirror a ``FrameBuffer`` onto a pygame window.

    Every pixel transition is applied to the in-memory bitmap first and then
    painted as a ``scale``-sized rectangle, so the window never has to be
    redrawn from scratch. ``hint`` multiplies the configured scale.
    """

    def __init__(
        self,
        *,
        scale: int = 10,
        palette: Sequence[RGBColor] = MONOCHROME,
        fullscreen: bool = False,
        caption: str = "CHIP-8 Emulator (Python)",
        pygame_module=None,
    ) -> None:
        if scale <= 0:
            raise ValueError("scale must be positive")
        self._scale = scale
        self._background, self._foreground = validate_palette(palette)
        self._fullscreen = fullscreen
        self._caption = caption
        self._pygame = pygame_module
        self._screen = None
        self._dirty = False
        self._framebuffer = FrameBuffer(DISPLAY_WIDTH, DISPLAY_HEIGHT)

    @property
    def framebuffer(self) -> FrameBuffer:
        return self._framebuffer

    @property
    def dirty(self) -> bool:
        return self._dirty

    def window_size(self) -> tuple[int, int]:
        return (DISPLAY_WIDTH * self._scale, DISPLAY_HEIGHT * self._scale)

    def initialize(self) -> None:
        pygame = self._pygame
        if pygame is None:
            try:
                import pygame  # type: ignore
            except Exception as exc:  # pragma: no cover - optional dependency
                raise RuntimeError("pygame is required for the display") from exc
            self._pygame = pygame

        flags = pygame.FULLSCREEN if self._fullscreen else 0
        self._screen = pygame.display.set_mode(self.window_size(), flags)
        pygame.display.set_caption(self._caption)
        if debug_enabled("video"):
            debug_log("video", "window=%dx%d scale=%d", *self.window_size(), self._scale)
        self.clear()

    def clear(self) -> None:
        self._framebuffer.clear()
        if self._screen is not None:
            self._screen.fill(self._background)
        self._dirty = True

    def get_width(self) -> int:
        return self._framebuffer.get_width()

    def get_height(self) -> int:
        return self._framebuffer.get_height()

    def draw_pixel(self, x: int, y: int, hint: float, on: bool) -> None:
        self._framebuffer.draw_pixel(x, y, hint, on)
        if self._screen is None:
            return
        size = max(1, int(round(self._scale * hint)))
        color = self._foreground if on else self._background
        self._screen.fill(color, (x * size, y * size, size, size))
        self._dirty = True

    def get_pixel(self, x: int, y: int) -> bool:
        return self._framebuffer.get_pixel(x, y)

    def present(self) -> None:
        """Flip the window if anything changed since the last call."""

        if not self._dirty or self._pygame is None or self._screen is None:
            return
        self._pygame.display.flip()
        self._dirty = False
