"""Display capability and renderers for the CHIP-8 emulator."""

from __future__ import annotations

from .display import DISPLAY_HEIGHT, DISPLAY_WIDTH, Display, FrameBuffer, NullDisplay
from .font import FONT_DATA, GLYPH_BYTES, GLYPH_COUNT, glyph
from .renderer import MONOCHROME, PygameDisplay, validate_palette

__all__ = [
    "Display",
    "FrameBuffer",
    "NullDisplay",
    "PygameDisplay",
    "DISPLAY_WIDTH",
    "DISPLAY_HEIGHT",
    "FONT_DATA",
    "GLYPH_BYTES",
    "GLYPH_COUNT",
    "glyph",
    "MONOCHROME",
    "validate_palette",
]
