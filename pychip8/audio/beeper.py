"""Audio capability and a pygame square-wave tone source."""

from __future__ import annotations

from array import array
from typing import Optional, Protocol

from pychip8.utils import debug_enabled, debug_log

TONE_FREQUENCY = 440.0


class Audio(Protocol):
    """Continuous tone driven by the sound timer."""

    def initialize(self) -> None:
        ...

    def start_sound(self) -> None:
        ...

    def stop_sound(self) -> None:
        ...


class MockAudio:
    """Records the tone state instead of playing it."""

    def __init__(self) -> None:
        self.is_playing = False
        self.start_calls = 0
        self.stop_calls = 0

    def initialize(self) -> None:
        self.is_playing = False

    def start_sound(self) -> None:
        self.start_calls += 1
        self.is_playing = True

    def stop_sound(self) -> None:
        self.stop_calls += 1
        self.is_playing = False


class SquareWaveBeeper:
    """Loop a square-wave tone on a pygame mixer channel.

    ``start_sound`` and ``stop_sound`` are called on every timer tick, so both
    are no-ops when the tone is already in the requested state.
    """

    def __init__(
        self,
        *,
        frequency: float = TONE_FREQUENCY,
        volume: float = 0.25,
        pygame_module=None,
    ) -> None:
        if frequency <= 0.0:
            raise ValueError("frequency must be positive")
        self._pygame = pygame_module
        self._frequency = frequency
        self._volume = max(0.0, min(1.0, volume))
        self._channel = None
        self._sound = None
        self._playing = False

    @property
    def playing(self) -> bool:
        return self._playing

    def initialize(self) -> None:
        pygame = self._pygame
        if pygame is None:
            try:
                import pygame  # type: ignore
            except Exception as exc:  # pragma: no cover - optional dependency
                raise RuntimeError("pygame is required for audio output") from exc
            self._pygame = pygame

        mixer_state = pygame.mixer.get_init()
        if mixer_state is None:
            raise RuntimeError("pygame mixer must be initialised before creating SquareWaveBeeper")
        sample_rate = mixer_state[0]
        self._sound = self._build_sound(sample_rate)
        self._playing = False
        if debug_enabled("audio"):
            debug_log("audio", "beeper sample_rate=%d freq=%.1f", sample_rate, self._frequency)

    def start_sound(self) -> None:
        if self._playing or self._sound is None:
            return
        channel = self._channel
        if channel is None:
            channel = self._pygame.mixer.find_channel(True)
            if channel is None:
                return
            self._channel = channel
        channel.play(self._sound, loops=-1)
        channel.set_volume(self._volume)
        self._playing = True

    def stop_sound(self) -> None:
        if not self._playing:
            return
        if self._channel is not None:
            self._channel.stop()
        self._playing = False

    def shutdown(self) -> None:
        """Stop any active tone and release the channel."""

        self.stop_sound()
        self._channel = None

    def _build_sound(self, sample_rate: int) -> Optional["pygame.mixer.Sound"]:
        period = max(2, int(round(sample_rate / self._frequency)))
        amplitude = 12_000
        buffer = array("h", (amplitude if index < period // 2 else -amplitude for index in range(period)))
        return self._pygame.mixer.Sound(buffer=buffer.tobytes())


__all__ = ["Audio", "MockAudio", "SquareWaveBeeper", "TONE_FREQUENCY"]
