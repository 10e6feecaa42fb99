"""Audio output for the CHIP-8 emulator."""

from .beeper import TONE_FREQUENCY, Audio, MockAudio, SquareWaveBeeper

__all__ = [
    "Audio",
    "MockAudio",
    "SquareWaveBeeper",
    "TONE_FREQUENCY",
]
