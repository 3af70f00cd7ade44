"""Pytest configuration and shared fixtures."""

import os

# Ensure headless pygame for all tests
os.environ['SDL_VIDEODRIVER'] = 'dummy'
os.environ['SDL_AUDIODRIVER'] = 'dummy'

import pytest

from treasure_island.audio import AudioBackend, AudioSequencer
from treasure_island.config import AudioConfig, GameConfig
from treasure_island.engine import SimulationController
from treasure_island.physics import PhysicsWorld


class ManualClock:
    """Audio clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class RecordingBackend(AudioBackend):
    """Backend that records what it was asked to play and stop."""

    available = True

    def __init__(self):
        self.played = []  # (tone, gain)
        self.stopped = []
        self.closed = False

    def play(self, tone, gain):
        self.played.append((tone, gain))
        return len(self.played) - 1

    def stop(self, handle):
        self.stopped.append(handle)

    def close(self):
        self.closed = True


@pytest.fixture
def physics():
    """Fresh physics world for each test."""
    return PhysicsWorld()


@pytest.fixture
def game_config():
    """Default game configuration."""
    return GameConfig()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def sequencer(backend, clock):
    """Sequencer wired to a recording backend and a manual clock."""
    return AudioSequencer(AudioConfig(), backend, clock)


@pytest.fixture
def controller(game_config):
    """Controller with no audio, seeded for repeatable particles."""
    return SimulationController(game_config, seed=1234)
