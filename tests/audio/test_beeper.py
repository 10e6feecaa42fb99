"""Tests for the audio capability implementations."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from pychip8.audio import MockAudio, SquareWaveBeeper


class FakeChannel:
    def __init__(self) -> None:
        self.plays: list[tuple[object, int]] = []
        self.stops = 0
        self.volume = None

    def play(self, sound, loops=0) -> None:
        self.plays.append((sound, loops))

    def stop(self) -> None:
        self.stops += 1

    def set_volume(self, volume: float) -> None:
        self.volume = volume


def make_fake_pygame(init_state=(44_100, -16, 1)) -> SimpleNamespace:
    channel = FakeChannel()
    sounds: list[bytes] = []

    def make_sound(buffer=None):
        sounds.append(buffer)
        return SimpleNamespace(buffer=buffer)

    mixer = SimpleNamespace(
        get_init=lambda: init_state,
        find_channel=lambda force=False: channel,
        Sound=make_sound,
    )
    return SimpleNamespace(mixer=mixer, channel=channel, sounds=sounds)


def test_mock_audio_tracks_state() -> None:
    audio = MockAudio()
    audio.start_sound()
    assert audio.is_playing
    audio.stop_sound()
    assert not audio.is_playing
    assert (audio.start_calls, audio.stop_calls) == (1, 1)


def test_beeper_builds_one_period_square_wave() -> None:
    pygame = make_fake_pygame()
    beeper = SquareWaveBeeper(frequency=441.0, pygame_module=pygame)

    beeper.initialize()

    assert len(pygame.sounds) == 1
    # 100 signed 16-bit samples per period at 44.1 kHz
    assert len(pygame.sounds[0]) == 200


def test_beeper_start_and_stop_are_idempotent() -> None:
    pygame = make_fake_pygame()
    beeper = SquareWaveBeeper(pygame_module=pygame)
    beeper.initialize()

    beeper.start_sound()
    beeper.start_sound()
    assert beeper.playing
    assert len(pygame.channel.plays) == 1
    assert pygame.channel.plays[0][1] == -1

    beeper.stop_sound()
    beeper.stop_sound()
    assert not beeper.playing
    assert pygame.channel.stops == 1


def test_beeper_requires_mixer() -> None:
    pygame = make_fake_pygame(init_state=None)
    beeper = SquareWaveBeeper(pygame_module=pygame)

    with pytest.raises(RuntimeError):
        beeper.initialize()


def test_beeper_rejects_bad_frequency() -> None:
    with pytest.raises(ValueError):
        SquareWaveBeeper(frequency=0.0)
