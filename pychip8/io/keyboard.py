"""CHIP-8 keypad handling.

The CPU only ever sees a single latched key code: ``0`` means nothing is
pressed, any other value is the hexadecimal keypad digit that is held down.
"""

from __future__ import annotations

from typing import Mapping, Protocol

from pychip8.utils import debug_enabled, debug_log

NO_KEY = 0x0


class Keyboard(Protocol):
    """Single-key input latch read by ``Ex9E``/``ExA1``/``Fx0A``."""

    def initialize(self) -> None:
        ...

    def set_key(self, code: int) -> None:
        ...

    def get_key(self) -> int:
        ...


KEYPAD_TEMPLATE: Mapping[str, int] = {
    "1": 0x1,
    "2": 0x2,
    "3": 0x3,
    "4": 0x4,
    "5": 0x5,
    "6": 0x6,
    "7": 0x7,
    "8": 0x8,
    "9": 0x9,
    "a": 0xA,
    "b": 0xB,
    "c": 0xC,
    "d": 0xD,
    "e": 0xE,
    "f": 0xF,
}


ALIAS_TABLE: Mapping[str, str] = {
    "[1]": "1",
    "[2]": "2",
    "[3]": "3",
    "[4]": "4",
    "[5]": "5",
    "[6]": "6",
    "[7]": "7",
    "[8]": "8",
    "[9]": "9",
}


class LatchKeyboard:
    """Stores whatever code it is given; the test double."""

    def __init__(self) -> None:
        self._key = NO_KEY

    def initialize(self) -> None:
        self._key = NO_KEY

    def set_key(self, code: int) -> None:
        self._key = code & 0xFF

    def get_key(self) -> int:
        return self._key


class NullKeyboard(LatchKeyboard):
    """Keyboard for headless runs; nothing ever presses it."""


class KeypadKeyboard:
    """Host keyboard mapped onto the hexadecimal keypad.

    ``set_key`` receives a host character code (``ord('a')`` and so on);
    anything outside ``1``-``9``/``a``-``f`` clears the latch.
    """

    def __init__(self) -> None:
        self._key = NO_KEY
        self._held: list[str] = []

    def initialize(self) -> None:
        self._key = NO_KEY
        self._held.clear()

    def set_key(self, code: int) -> None:
        name = chr(code & 0xFF).lower() if code else ""
        self._key = KEYPAD_TEMPLATE.get(name, NO_KEY)

    def get_key(self) -> int:
        return self._key

    def press(self, key_name: str) -> None:
        name = self._lookup(key_name)
        if name is None:
            if debug_enabled("input"):
                debug_log("input", "unmapped_press=%s", key_name)
            return
        if name in self._held:
            self._held.remove(name)
        self._held.append(name)
        self._key = KEYPAD_TEMPLATE[name]
        if debug_enabled("input"):
            debug_log("input", "press=%s key=%X", name, self._key)

    def release(self, key_name: str) -> None:
        name = self._lookup(key_name)
        if name is None or name not in self._held:
            return
        self._held.remove(name)
        # fall back to the most recent key still held down
        self._key = KEYPAD_TEMPLATE[self._held[-1]] if self._held else NO_KEY
        if debug_enabled("input"):
            debug_log("input", "release=%s key=%X", name, self._key)

    def _lookup(self, key_name: str) -> str | None:
        name = key_name.lower()
        name = ALIAS_TABLE.get(name, name)
        return name if name in KEYPAD_TEMPLATE else None
