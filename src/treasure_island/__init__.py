"""treasure-island: 2D treasure-hunt platformer simulation core.

A fixed-tick simulation of a player running and jumping around a small island,
collecting treasures under gravity and friction. The core (physics, pickups,
particles, win/restart state machine and a procedural audio sequencer) runs
headless and is driven one tick at a time; a thin pygame host in `app` draws
snapshots and plays the effect events.
"""

from .config import PhysicsConfig, WorldConfig, ParticleConfig, AudioConfig, GameConfig, CONFIGS, get_config
from .entities import Player, Treasure, TreasureKind, Platform, Particle, ParticleKind
from .events import EffectEvent, InputSnapshot
from .physics import PhysicsWorld
from .collectibles import CollectibleDetector, PickupResult
from .particles import ParticleSystem
from .audio import AudioSequencer, AudioBackend, NullAudioBackend, Envelope, EnvelopePoint, Tone
from .engine import SimulationController, GameSnapshot, GameState

__all__ = [
    "PhysicsConfig",
    "WorldConfig",
    "ParticleConfig",
    "AudioConfig",
    "GameConfig",
    "CONFIGS",
    "get_config",
    "Player",
    "Treasure",
    "TreasureKind",
    "Platform",
    "Particle",
    "ParticleKind",
    "EffectEvent",
    "InputSnapshot",
    "PhysicsWorld",
    "CollectibleDetector",
    "PickupResult",
    "ParticleSystem",
    "AudioSequencer",
    "AudioBackend",
    "NullAudioBackend",
    "Envelope",
    "EnvelopePoint",
    "Tone",
    "SimulationController",
    "GameSnapshot",
    "GameState",
]
