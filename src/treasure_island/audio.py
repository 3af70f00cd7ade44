"""Procedural audio sequencer.

Two independent schedules share one timer queue:

- Background music: a melody track and a bass track, each looping on its own
  length. Notes are queued a short lookahead ahead of the audio clock and
  dispatched to the backend when their start time arrives.
- One-shot effects: each EffectEvent maps to one or more tones (a chord for
  the win fanfare) that start immediately and overlap freely with each other
  and with the music.

The audio clock is independent of the simulation tick counter. By default it
is time.perf_counter(); tests inject a manual clock. The simulation only
touches the sequencer through trigger() and update().

Cancelling music removes its pending entries from the queue and stops the
voices that are already sounding. Effects are never affected by music
switches and vice versa.
"""

import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import AudioConfig
from .events import EffectEvent

logger = logging.getLogger(__name__)


# Equal temperament, A4 = 440 Hz
NOTE_FREQUENCIES: Dict[str, float] = {
    "C2": 65.41, "C#2": 69.30, "D2": 73.42, "D#2": 77.78,
    "E2": 82.41, "F2": 87.31, "F#2": 92.50, "G2": 98.00,
    "G#2": 103.83, "A2": 110.00, "A#2": 116.54, "B2": 123.47,

    "C3": 130.81, "C#3": 138.59, "D3": 146.83, "D#3": 155.56,
    "E3": 164.81, "F3": 174.61, "F#3": 185.00, "G3": 196.00,
    "G#3": 207.65, "A3": 220.00, "A#3": 233.08, "B3": 246.94,

    "C4": 261.63, "C#4": 277.18, "D4": 293.66, "D#4": 311.13,
    "E4": 329.63, "F4": 349.23, "F#4": 369.99, "G4": 392.00,
    "G#4": 415.30, "A4": 440.00, "A#4": 466.16, "B4": 493.88,
}

DEFAULT_FREQUENCY = 440.0


def note_frequency(symbol: str) -> float:
    """Frequency for a note symbol like "C4" or "F#2". Unknown symbols give A4."""
    return NOTE_FREQUENCIES.get(symbol, DEFAULT_FREQUENCY)


class Waveform(Enum):
    SINE = "sine"
    SQUARE = "square"
    TRIANGLE = "triangle"
    SAWTOOTH = "sawtooth"


class Channel(Enum):
    """Mixer group a tone is routed through."""
    MUSIC = "music"
    SFX = "sfx"


class Ramp(Enum):
    """How an envelope moves between breakpoints."""
    STEP = "step"  # Hold each value until the next breakpoint
    LINEAR = "linear"
    EXPONENTIAL = "exponential"  # Falls back to linear where either end is <= 0


@dataclass(frozen=True)
class EnvelopePoint:
    """Breakpoint at `time` seconds after the tone starts."""
    time: float
    gain: float
    frequency: Optional[float] = None  # None keeps the tone's base frequency


@dataclass(frozen=True)
class Envelope:
    """Ordered gain/frequency breakpoints for one tone."""
    points: Tuple[EnvelopePoint, ...]
    ramp: Ramp = Ramp.STEP

    def __post_init__(self):
        points = tuple(self.points)
        object.__setattr__(self, "points", points)
        if not points:
            raise ValueError("Envelope needs at least one point")
        if points[0].time < 0:
            raise ValueError(f"Envelope offsets must be non-negative, got {points[0].time}")
        for prev, curr in zip(points, points[1:]):
            if curr.time <= prev.time:
                raise ValueError(
                    f"Envelope offsets must be strictly increasing: {prev.time} then {curr.time}"
                )

    @property
    def duration(self) -> float:
        """Offset of the last breakpoint."""
        return self.points[-1].time

    def gain_at(self, t):
        """Gain at offset `t` (float or numpy array of offsets)."""
        return self._evaluate([p.gain for p in self.points], t)

    def frequency_at(self, t, default: float):
        """Frequency at offset `t`; points without a frequency use `default`."""
        values = [default if p.frequency is None else p.frequency for p in self.points]
        return self._evaluate(values, t)

    def _evaluate(self, values: Sequence[float], t):
        times = np.array([p.time for p in self.points], dtype=np.float64)
        vals = np.array(values, dtype=np.float64)
        t_arr = np.asarray(t, dtype=np.float64)

        if len(times) == 1:
            out = np.full_like(t_arr, vals[0])
        elif self.ramp is Ramp.STEP:
            idx = np.clip(np.searchsorted(times, t_arr, side="right") - 1, 0, len(times) - 1)
            out = vals[idx]
        elif self.ramp is Ramp.LINEAR:
            out = np.interp(t_arr, times, vals)
        else:
            idx = np.clip(np.searchsorted(times, t_arr, side="right") - 1, 0, len(times) - 2)
            t0, t1 = times[idx], times[idx + 1]
            v0, v1 = vals[idx], vals[idx + 1]
            frac = np.clip((t_arr - t0) / (t1 - t0), 0.0, 1.0)
            positive = (v0 > 0) & (v1 > 0)
            ratio = np.where(positive, v1 / np.where(v0 > 0, v0, 1.0), 1.0)
            out = np.where(positive, v0 * ratio ** frac, v0 + (v1 - v0) * frac)

        if np.ndim(out) == 0:
            return float(out)
        return out

    def scaled(self, factor: float, frequency: Optional[float] = None) -> "Envelope":
        """Copy with every gain multiplied by `factor`, optionally pinning the frequency."""
        return Envelope(
            tuple(
                EnvelopePoint(
                    p.time,
                    p.gain * factor,
                    frequency if frequency is not None else p.frequency,
                )
                for p in self.points
            ),
            self.ramp,
        )

    @classmethod
    def exponential_decay(cls, initial: float, floor: float, duration: float) -> "Envelope":
        """Exponential fall from `initial` to `floor` over `duration` seconds."""
        return cls(
            (EnvelopePoint(0.0, initial), EnvelopePoint(duration, floor)),
            Ramp.EXPONENTIAL,
        )

    @classmethod
    def music_note(cls, volume: float, duration: float) -> "Envelope":
        """Attack to `volume`, sag to 70% by 80% of the note, release to silence."""
        attack = min(0.05, duration * 0.25)
        return cls(
            (
                EnvelopePoint(0.0, 0.0),
                EnvelopePoint(attack, volume),
                EnvelopePoint(duration * 0.8, volume * 0.7),
                EnvelopePoint(duration, 0.0),
            ),
            Ramp.LINEAR,
        )


# Gain curve for tones that don't specify one
DEFAULT_INITIAL_GAIN = 0.3
DEFAULT_FLOOR_GAIN = 0.01


@dataclass(frozen=True)
class Tone:
    """A single oscillator voice."""
    frequency: float
    duration: float  # Seconds
    waveform: Waveform = Waveform.SINE
    envelope: Optional[Envelope] = None
    channel: Channel = Channel.SFX

    def __post_init__(self):
        if self.duration <= 0:
            raise ValueError(f"Tone duration must be positive, got {self.duration}")

    @property
    def effective_envelope(self) -> Envelope:
        """The explicit envelope, or the default exponential decay."""
        if self.envelope is not None:
            return self.envelope
        return Envelope.exponential_decay(DEFAULT_INITIAL_GAIN, DEFAULT_FLOOR_GAIN, self.duration)


def chord(
    frequencies: Sequence[float],
    duration: float,
    waveform: Waveform,
    envelope: Envelope,
    voice_gain: float = 0.3,
) -> Tuple[Tone, ...]:
    """Simultaneous tones sharing an envelope, each voice attenuated by `voice_gain`."""
    return tuple(
        Tone(freq, duration, waveform, envelope.scaled(voice_gain, frequency=freq))
        for freq in frequencies
    )


def _env(ramp: Ramp = Ramp.STEP, *points: Tuple) -> Envelope:
    return Envelope(tuple(EnvelopePoint(*p) for p in points), ramp)


EFFECT_SOUNDS: Dict[EffectEvent, Tuple[Tone, ...]] = {
    # Rising then falling sine blip
    EffectEvent.JUMP: (
        Tone(300.0, 0.15, Waveform.SINE, _env(
            Ramp.STEP, (0.0, 0.4, 300.0), (0.05, 0.3, 500.0), (0.1, 0.1, 400.0), (0.15, 0.0, 200.0),
        )),
    ),
    # Ascending chime
    EffectEvent.COLLECT: (
        Tone(600.0, 0.2, Waveform.SQUARE, _env(
            Ramp.STEP,
            (0.0, 0.3, 600.0), (0.05, 0.4, 800.0), (0.1, 0.3, 1000.0),
            (0.15, 0.1, 1200.0), (0.2, 0.0, 1000.0),
        )),
    ),
    # Soft thud
    EffectEvent.STEP: (
        Tone(150.0, 0.08, Waveform.SQUARE, _env(
            Ramp.STEP, (0.0, 0.1, 150.0), (0.02, 0.15, 120.0), (0.05, 0.05, 100.0), (0.08, 0.0, 80.0),
        )),
    ),
    # C major fanfare
    EffectEvent.WIN: chord(
        (523.0, 659.0, 784.0), 1.0, Waveform.TRIANGLE,
        _env(Ramp.STEP, (0.0, 0.4), (0.2, 0.5), (0.8, 0.3), (1.0, 0.0)),
    ),
}


@dataclass(frozen=True)
class SequenceNote:
    """A note in a background track, `beats` long."""
    note: str
    beats: float

    @property
    def frequency(self) -> float:
        return note_frequency(self.note)


@dataclass(frozen=True)
class BackgroundTrack:
    """A looping line of notes."""
    name: str
    notes: Tuple[SequenceNote, ...]
    waveform: Waveform = Waveform.TRIANGLE
    volume: float = 0.1
    beat_scale: float = 1.0  # 2.0 plays every note twice as long

    def __post_init__(self):
        object.__setattr__(self, "notes", tuple(self.notes))
        if not self.notes:
            raise ValueError(f"Track {self.name!r} has no notes")
        if any(n.beats <= 0 for n in self.notes):
            raise ValueError(f"Track {self.name!r} has a note with non-positive length")

    def note_duration(self, note: SequenceNote, beat_duration: float) -> float:
        """Sounding length of `note` in seconds."""
        return note.beats * beat_duration * self.beat_scale

    def loop_duration(self, beat_duration: float) -> float:
        """Seconds for one pass through the track."""
        return sum(self.note_duration(n, beat_duration) for n in self.notes)


def _notes(*pairs: Tuple[str, float]) -> Tuple[SequenceNote, ...]:
    return tuple(SequenceNote(note, beats) for note, beats in pairs)


MELODY = BackgroundTrack(
    name="melody",
    notes=_notes(
        ("C4", 0.5), ("G3", 0.25), ("C4", 0.25),
        ("E4", 0.5), ("D4", 0.5),
        ("C4", 0.75), ("G3", 0.25),
        ("A3", 0.5), ("G3", 0.5),

        ("C4", 0.5), ("G3", 0.25), ("C4", 0.25),
        ("E4", 0.5), ("F4", 0.5),
        ("E4", 0.5), ("D4", 0.5),
        ("C4", 1.0),
    ),
    waveform=Waveform.TRIANGLE,
    volume=0.1,
)

BASS = BackgroundTrack(
    name="bass",
    notes=_notes(
        ("C2", 1.0), ("G2", 1.0), ("A2", 1.0), ("F2", 1.0),
        ("C2", 1.0), ("G2", 1.0), ("F2", 1.0), ("C2", 1.0),
    ),
    waveform=Waveform.SAWTOOTH,
    volume=0.08,
    beat_scale=2.0,
)


class AudioBackend:
    """Something that can make tones audible.

    play() returns an opaque handle that stop() accepts.
    """

    available: bool = True

    def play(self, tone: Tone, gain: float) -> Any:
        """Start sounding `tone` now at channel gain `gain`."""
        raise NotImplementedError

    def stop(self, handle: Any) -> None:
        """Silence a voice returned by play()."""
        raise NotImplementedError

    def close(self) -> None:
        """Release the output device."""


class NullAudioBackend(AudioBackend):
    """Backend for hosts without sound. Accepts nothing, plays nothing."""

    available = False

    def play(self, tone: Tone, gain: float) -> Any:
        return None

    def stop(self, handle: Any) -> None:
        pass


@dataclass(order=True)
class ScheduledTone:
    """Queue entry: `tone` due at audio-clock time `start`."""
    start: float
    seq: int
    tone: Tone = field(compare=False)
    source: str = field(compare=False)  # Track name or effect event name


@dataclass
class _Voice:
    tone: Tone
    end: float
    handle: Any
    source: str


@dataclass
class _TrackCursor:
    index: int
    next_start: float


class AudioSequencer:
    """Schedules background music and one-shot effects against an audio clock."""

    def __init__(
        self,
        config: Optional[AudioConfig] = None,
        backend: Optional[AudioBackend] = None,
        clock: Optional[Callable[[], float]] = None,
        tracks: Sequence[BackgroundTrack] = (MELODY, BASS),
        effects: Optional[Dict[EffectEvent, Tuple[Tone, ...]]] = None,
    ):
        """Create a sequencer.

        Args:
            config: Tempo, gains and switches. Uses defaults if None.
            backend: Sound output. A NullAudioBackend if None.
            clock: Returns audio time in seconds. time.perf_counter if None.
            tracks: Background tracks played together while music is on.
            effects: Tones per effect event. EFFECT_SOUNDS if None.
        """
        self.config = config or AudioConfig()
        self.backend = backend or NullAudioBackend()
        self.clock = clock or time.perf_counter
        self.tracks = tuple(tracks)
        self.effects = dict(EFFECT_SOUNDS if effects is None else effects)

        self.music_enabled = self.config.music_enabled
        self.sfx_enabled = self.config.sfx_enabled

        self._queue: List[ScheduledTone] = []
        self._sounding: List[_Voice] = []
        self._cursors: Dict[str, _TrackCursor] = {}
        self._seq = itertools.count()

        if not self.backend.available:
            logger.warning("Audio output unavailable; effects and music are disabled")

    @property
    def available(self) -> bool:
        return self.backend.available

    @property
    def music_playing(self) -> bool:
        """Whether the background loop is currently scheduled."""
        return bool(self._cursors)

    def _now(self, now: Optional[float]) -> float:
        return self.clock() if now is None else now

    def _gain(self, channel: Channel) -> float:
        group = self.config.music_gain if channel is Channel.MUSIC else self.config.sfx_gain
        return self.config.master_gain * group

    # --- Background music ---

    def start_music(self, now: Optional[float] = None) -> None:
        """Start the background loop from its first note. No-op if already playing."""
        if not self.music_enabled or not self.available or self.music_playing:
            return
        t = self._now(now)
        for track in self.tracks:
            self._cursors[track.name] = _TrackCursor(index=0, next_start=t)
        logger.info("Background music started")
        self.update(t)

    def stop_music(self) -> None:
        """Stop the loop, dropping queued notes and silencing sounding ones."""
        was_playing = self.music_playing
        self._cursors.clear()
        self._cancel(Channel.MUSIC)
        if was_playing:
            logger.info("Background music stopped")

    def set_music_enabled(self, enabled: bool) -> None:
        """Switch music on (restarting the loop from the top) or off."""
        self.music_enabled = bool(enabled)
        if self.music_enabled:
            self.start_music()
        else:
            self.stop_music()

    def toggle_music(self) -> bool:
        """Flip the music switch. Returns the new state."""
        self.set_music_enabled(not self.music_enabled)
        return self.music_enabled

    def resume(self) -> None:
        """Start music if it is enabled but not yet running (first user input)."""
        self.start_music()

    # --- Effects ---

    def set_sfx_enabled(self, enabled: bool) -> None:
        """Switch one-shot effects on or off. Music is unaffected."""
        self.sfx_enabled = bool(enabled)
        logger.info("Sound effects %s", "on" if self.sfx_enabled else "off")

    def toggle_sfx(self) -> bool:
        """Flip the effects switch. Returns the new state."""
        self.set_sfx_enabled(not self.sfx_enabled)
        return self.sfx_enabled

    def trigger(self, event: EffectEvent, now: Optional[float] = None) -> int:
        """Start the tones mapped to `event`.

        Returns:
            Number of tones started (0 when effects are off or audio is unavailable).
        """
        if not self.sfx_enabled or not self.available:
            logger.debug("Dropped %s effect", event.value)
            return 0
        t = self._now(now)
        tones = self.effects.get(event, ())
        for tone in tones:
            self._push(t, tone, event.value)
        self._dispatch(t)
        return len(tones)

    def cancel_effects(self) -> None:
        """Silence sounding effects and drop any queued ones."""
        self._cancel(Channel.SFX)

    # --- Clock ---

    def update(self, now: Optional[float] = None) -> None:
        """Advance to audio time `now`: queue upcoming notes, start due ones, retire finished ones."""
        t = self._now(now)
        self._schedule_music(t)
        self._dispatch(t)
        self._sounding = [v for v in self._sounding if v.end > t]

    def pending(self, channel: Optional[Channel] = None) -> List[ScheduledTone]:
        """Queued entries in start order, optionally for one channel."""
        return sorted(e for e in self._queue if channel is None or e.tone.channel is channel)

    def sounding(self, channel: Optional[Channel] = None) -> List[Tone]:
        """Tones started and not yet finished, optionally for one channel."""
        return [v.tone for v in self._sounding if channel is None or v.tone.channel is channel]

    def shutdown(self) -> None:
        """Stop everything and release the backend."""
        self.stop_music()
        self.cancel_effects()
        self.backend.close()

    def _push(self, start: float, tone: Tone, source: str) -> None:
        heapq.heappush(self._queue, ScheduledTone(start, next(self._seq), tone, source))

    def _schedule_music(self, now: float) -> None:
        beat = self.config.beat_duration
        horizon = now + self.config.lookahead
        for track in self.tracks:
            cursor = self._cursors.get(track.name)
            if cursor is None:
                continue

            # Host stalled for more than a loop: skip whole loops at once
            loop = track.loop_duration(beat)
            behind = now - cursor.next_start
            if behind > loop:
                cursor.next_start += (behind // loop) * loop

            while cursor.next_start <= horizon:
                note = track.notes[cursor.index]
                duration = track.note_duration(note, beat)
                # Notes that already ended are skipped, not played late
                if cursor.next_start + duration > now:
                    self._push(
                        cursor.next_start,
                        Tone(
                            note.frequency,
                            duration,
                            track.waveform,
                            Envelope.music_note(track.volume, duration),
                            Channel.MUSIC,
                        ),
                        track.name,
                    )
                cursor.next_start += duration
                cursor.index = (cursor.index + 1) % len(track.notes)

    def _dispatch(self, now: float) -> None:
        while self._queue and self._queue[0].start <= now:
            entry = heapq.heappop(self._queue)
            handle = self.backend.play(entry.tone, self._gain(entry.tone.channel))
            self._sounding.append(
                _Voice(entry.tone, entry.start + entry.tone.duration, handle, entry.source)
            )

    def _cancel(self, channel: Channel) -> None:
        self._queue = [e for e in self._queue if e.tone.channel is not channel]
        heapq.heapify(self._queue)
        keep = []
        for voice in self._sounding:
            if voice.tone.channel is channel:
                self.backend.stop(voice.handle)
            else:
                keep.append(voice)
        self._sounding = keep
