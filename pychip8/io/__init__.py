"""Input helpers for the CHIP-8 emulator."""

from .keyboard import KEYPAD_TEMPLATE, NO_KEY, Keyboard, KeypadKeyboard, LatchKeyboard, NullKeyboard

__all__ = [
    "Keyboard",
    "KeypadKeyboard",
    "LatchKeyboard",
    "NullKeyboard",
    "KEYPAD_TEMPLATE",
    "NO_KEY",
]
