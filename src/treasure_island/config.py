"""Configuration system for the treasure island simulation.

All tuning constants live here as named dataclass fields rather than literals
scattered through the simulation. Groups:

- PhysicsConfig: player movement and animation timers (per-tick units)
- WorldConfig: world bounds, ground line, platform and treasure layout
- ParticleConfig: particle lifetime and burst shapes
- AudioConfig: tempo, mixer gains and music/SFX switches

Units are pixels and ticks. The simulation assumes a fixed nominal tick rate
(GameConfig.fps) and does not compensate for variable frame time.
"""

import copy
from dataclasses import asdict, dataclass, field
from typing import Tuple, Dict, Any, List, ClassVar

from .entities import TreasureKind


@dataclass
class PhysicsConfig:
    """Player movement constants, expressed per tick."""

    gravity: float = 0.5  # Added to vy every tick (px/tick^2, y grows downward)
    friction: float = 0.8  # vx multiplier on ticks with no horizontal input
    move_speed: float = 3.0  # |vx| while a direction is held (px/tick)
    jump_impulse: float = 12.0  # vy is set to -jump_impulse on jump

    player_width: float = 30.0
    player_height: float = 40.0
    player_start: Tuple[float, float] = (100.0, 220.0)  # Top-left corner

    # Footstep cadence
    step_interval: int = 20  # A step fires once the walking counter exceeds this (every 21 ticks)
    step_speed_threshold: float = 0.1  # |vx| above this counts as walking

    # Blink animation
    blink_period: int = 180
    blink_duration: int = 10

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "gravity": self.gravity,
            "friction": self.friction,
            "move_speed": self.move_speed,
            "jump_impulse": self.jump_impulse,
            "player_width": self.player_width,
            "player_height": self.player_height,
            "player_start": list(self.player_start),
            "step_interval": self.step_interval,
            "step_speed_threshold": self.step_speed_threshold,
            "blink_period": self.blink_period,
            "blink_duration": self.blink_duration,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PhysicsConfig":
        """Create from dictionary. Missing keys fall back to defaults."""
        defaults = cls()
        return cls(
            gravity=d.get("gravity", defaults.gravity),
            friction=d.get("friction", defaults.friction),
            move_speed=d.get("move_speed", defaults.move_speed),
            jump_impulse=d.get("jump_impulse", defaults.jump_impulse),
            player_width=d.get("player_width", defaults.player_width),
            player_height=d.get("player_height", defaults.player_height),
            player_start=tuple(d.get("player_start", defaults.player_start)),
            step_interval=d.get("step_interval", defaults.step_interval),
            step_speed_threshold=d.get("step_speed_threshold", defaults.step_speed_threshold),
            blink_period=d.get("blink_period", defaults.blink_period),
            blink_duration=d.get("blink_duration", defaults.blink_duration),
        )


def _default_platforms() -> List[Tuple[float, float, float, float]]:
    return [(480.0, 200.0, 60.0, 20.0)]


def _default_treasures() -> List[Tuple[float, float, TreasureKind]]:
    return [
        (200.0, 240.0, TreasureKind.COIN),
        (400.0, 240.0, TreasureKind.GEM),
        (500.0, 180.0, TreasureKind.CROWN),  # Above the platform
    ]


@dataclass
class WorldConfig:
    """World bounds and static layout."""

    width: float = 800.0
    height: float = 400.0
    ground_y: float = 260.0  # Ground line; the player's lower edge rests here

    # (x, y, width, height) with (x, y) the top-left corner
    platforms: List[Tuple[float, float, float, float]] = field(default_factory=_default_platforms)
    # Extra depth below a platform's underside that still snaps a falling player on top
    platform_tolerance: float = 10.0

    # (x, y, kind) anchor points; value comes from the kind
    treasures: List[Tuple[float, float, TreasureKind]] = field(default_factory=_default_treasures)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (treasure kinds by name)."""
        return {
            "width": self.width,
            "height": self.height,
            "ground_y": self.ground_y,
            "platforms": [list(p) for p in self.platforms],
            "platform_tolerance": self.platform_tolerance,
            "treasures": [[x, y, kind.name.lower()] for x, y, kind in self.treasures],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WorldConfig":
        """Create from dictionary produced by to_dict()."""
        defaults = cls()
        treasures = d.get("treasures")
        if treasures is None:
            parsed = defaults.treasures
        else:
            parsed = [(float(x), float(y), TreasureKind.from_name(kind)) for x, y, kind in treasures]
        return cls(
            width=d.get("width", defaults.width),
            height=d.get("height", defaults.height),
            ground_y=d.get("ground_y", defaults.ground_y),
            platforms=[tuple(p) for p in d.get("platforms", defaults.platforms)],
            platform_tolerance=d.get("platform_tolerance", defaults.platform_tolerance),
            treasures=parsed,
        )


@dataclass
class ParticleConfig:
    """Particle lifetime and burst parameters."""

    decay: float = 0.02  # Life lost per tick (life starts at 1.0 -> 50 ticks)
    gravity: float = 0.1  # Lighter than the player's gravity

    jump_burst: int = 5
    jump_spread: float = 1.0  # Fraction of player width dust spawns across
    jump_speed: float = 2.0  # Max |vx|; vy drawn from [-jump_speed, 0]

    collect_burst: int = 10
    collect_spread: float = 10.0  # Half-width of the spawn box around the treasure
    collect_speed: float = 3.0  # Max |vx| and |vy|

    SIZE_RANGE: ClassVar[Tuple[float, float]] = (1.0, 4.0)

    def __post_init__(self):
        if self.decay <= 0:
            raise ValueError(f"Particle decay must be positive, got {self.decay}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ParticleConfig":
        """Create from dictionary. Unknown keys are ignored."""
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


@dataclass
class AudioConfig:
    """Audio sequencer settings."""

    tempo: float = 120.0  # Beats per minute for the background sequence
    master_gain: float = 0.7
    music_gain: float = 0.3
    sfx_gain: float = 0.5
    music_enabled: bool = True
    sfx_enabled: bool = True
    sample_rate: int = 22050
    lookahead: float = 0.1  # Seconds of background music scheduled ahead of the clock

    def __post_init__(self):
        if self.tempo <= 0:
            raise ValueError(f"Tempo must be positive, got {self.tempo}")

    @property
    def beat_duration(self) -> float:
        """Seconds per beat."""
        return 60.0 / self.tempo

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AudioConfig":
        """Create from dictionary. Unknown keys are ignored."""
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


@dataclass
class GameConfig:
    """Complete game configuration combining all parameter groups."""
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    world: WorldConfig = field(default_factory=WorldConfig)
    particles: ParticleConfig = field(default_factory=ParticleConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)

    pickup_radius: float = 25.0  # Player centre to treasure anchor distance
    fps: int = 60
    seed: int = 0  # Seeds particle jitter so runs are reproducible

    def to_dict(self) -> Dict[str, Any]:
        """Convert to nested dictionary."""
        return {
            "physics": self.physics.to_dict(),
            "world": self.world.to_dict(),
            "particles": self.particles.to_dict(),
            "audio": self.audio.to_dict(),
            "pickup_radius": self.pickup_radius,
            "fps": self.fps,
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GameConfig":
        """Create from dictionary produced by to_dict()."""
        return cls(
            physics=PhysicsConfig.from_dict(d.get("physics", {})),
            world=WorldConfig.from_dict(d.get("world", {})),
            particles=ParticleConfig.from_dict(d.get("particles", {})),
            audio=AudioConfig.from_dict(d.get("audio", {})),
            pickup_radius=d.get("pickup_radius", 25.0),
            fps=d.get("fps", 60),
            seed=d.get("seed", 0),
        )


# Named presets. "default" is the canonical constant set; the others are
# complete alternative layouts, each self-consistent.
CONFIGS = {
    "default": GameConfig(),

    # Wider beach: taller ground line, quicker player, low platform
    "lagoon": GameConfig(
        physics=PhysicsConfig(
            gravity=0.6,
            move_speed=4.0,
            jump_impulse=12.0,
            player_width=32.0,
            player_height=44.0,
            player_start=(100.0, 280.0),
        ),
        world=WorldConfig(
            height=480.0,
            ground_y=340.0,
            platforms=[(320.0, 280.0, 60.0, 20.0)],
            platform_tolerance=0.0,
            treasures=[
                (200.0, 315.0, TreasureKind.COIN),
                (400.0, 315.0, TreasureKind.GEM),
                (600.0, 315.0, TreasureKind.CROWN),
                (350.0, 260.0, TreasureKind.COIN),  # Above the platform
            ],
        ),
        pickup_radius=20.0,
    ),
}


def get_config(name: str) -> GameConfig:
    """Look up a preset by name.

    Raises:
        ValueError: If no preset has that name.
    """
    if name not in CONFIGS:
        raise ValueError(f"Unknown preset: {name} (choose from {', '.join(sorted(CONFIGS))})")
    return copy.deepcopy(CONFIGS[name])
