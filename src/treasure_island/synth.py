"""Waveform synthesis and the pygame.mixer audio backend.

Tones are rendered to numpy buffers once and cached as pygame Sounds; the
envelope is baked into the buffer and the channel gain is applied with
Channel.set_volume() at play time.
"""

import logging
import math
from typing import Any, Dict, Optional, Tuple

import numpy as np
import pygame

from .audio import AudioBackend, Tone, Waveform

logger = logging.getLogger(__name__)


def oscillator(waveform: Waveform, cycles: np.ndarray) -> np.ndarray:
    """Evaluate a unit-amplitude waveform at accumulated phase `cycles` (in turns)."""
    frac = np.mod(cycles, 1.0)
    if waveform is Waveform.SINE:
        return np.sin(2 * math.pi * cycles)
    if waveform is Waveform.SQUARE:
        return np.where(frac < 0.5, 1.0, -1.0)
    if waveform is Waveform.TRIANGLE:
        return 1.0 - 4.0 * np.abs(frac - 0.5)
    if waveform is Waveform.SAWTOOTH:
        return 2.0 * frac - 1.0
    raise ValueError(f"Unknown waveform: {waveform}")


def render_tone(tone: Tone, sample_rate: int) -> np.ndarray:
    """Render a tone to mono float samples in [-1, 1].

    Frequency is integrated sample by sample so envelope frequency changes
    stay phase-continuous.

    Args:
        tone: Tone to render.
        sample_rate: Samples per second.

    Returns:
        float32 array of round(duration * sample_rate) samples (at least 1).
    """
    n = max(1, int(round(tone.duration * sample_rate)))
    t = np.arange(n, dtype=np.float64) / sample_rate

    envelope = tone.effective_envelope
    gains = np.broadcast_to(envelope.gain_at(t), (n,))
    freqs = np.broadcast_to(envelope.frequency_at(t, tone.frequency), (n,))

    cycles = np.cumsum(freqs) / sample_rate
    wave = oscillator(tone.waveform, cycles) * gains
    return np.clip(wave, -1.0, 1.0).astype(np.float32)


def to_pcm(samples: np.ndarray, channels: int = 2) -> np.ndarray:
    """Convert float samples to C-contiguous int16 PCM with `channels` columns."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    if channels == 1:
        return np.ascontiguousarray(pcm)
    return np.ascontiguousarray(np.column_stack([pcm] * channels))


class MixerBackend(AudioBackend):
    """Plays tones through pygame.mixer.

    If the mixer cannot be opened (no sound device, headless CI) the backend
    reports available = False and every call becomes a no-op.
    """

    def __init__(self, sample_rate: int = 22050, num_channels: int = 32):
        self.sample_rate = sample_rate
        self.channels = 2
        self._cache: Dict[Tone, pygame.mixer.Sound] = {}

        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=sample_rate, size=-16, channels=2, buffer=512)
            freq, _size, channels = pygame.mixer.get_init()
            pygame.mixer.set_num_channels(num_channels)
        except pygame.error as e:
            logger.warning("Could not open audio device: %s", e)
            self.available = False
            return

        self.sample_rate = freq
        self.channels = channels
        self.available = True
        logger.debug("Mixer open at %d Hz, %d channel(s)", freq, channels)

    def sound_for(self, tone: Tone) -> pygame.mixer.Sound:
        """Rendered Sound for `tone`, cached by tone."""
        sound = self._cache.get(tone)
        if sound is None:
            samples = render_tone(tone, self.sample_rate)
            sound = pygame.sndarray.make_sound(to_pcm(samples, self.channels))
            self._cache[tone] = sound
        return sound

    def play(self, tone: Tone, gain: float) -> Optional[Tuple[Any, Any]]:
        if not self.available:
            return None
        sound = self.sound_for(tone)
        channel = sound.play()
        if channel is None:
            # Every mixer channel busy
            return None
        channel.set_volume(max(0.0, min(1.0, gain)))
        return channel, sound

    def stop(self, handle: Optional[Tuple[Any, Any]]) -> None:
        if handle is None:
            return
        channel, sound = handle
        # The channel may already be playing something else
        if channel.get_sound() is sound:
            channel.stop()

    def close(self) -> None:
        self._cache.clear()
        if self.available and pygame.mixer.get_init():
            pygame.mixer.quit()
        self.available = False
