"""Game entities: player, treasures, platforms, particles.

Plain state records. Behaviour lives in the systems that own them
(physics.py, collectibles.py, particles.py); the controller in engine.py
is the only thing that holds references to them across ticks.

Coordinates are screen coordinates: origin top-left, y grows downward.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


# Life at or below this counts as expired (absorbs float drift from repeated decay)
LIFE_EPSILON = 1e-9


class TreasureKind(Enum):
    """Treasure category. Value is (points, RGB colour)."""
    COIN = (100, (255, 215, 0))
    GEM = (200, (255, 105, 180))
    CROWN = (300, (255, 200, 40))

    @property
    def points(self) -> int:
        return self.value[0]

    @property
    def color(self) -> Tuple[int, int, int]:
        return self.value[1]

    @classmethod
    def from_name(cls, name: str) -> "TreasureKind":
        """Resolve a case-insensitive name ("coin", "GEM", ...).

        Raises:
            ValueError: If the name is not a treasure kind.
        """
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown treasure kind: {name}") from None


class ParticleKind(Enum):
    """Particle category. Value is the RGB colour."""
    DUST = (244, 211, 94)  # Kicked up by jumps
    SPARKLE = (255, 215, 0)  # Treasure pickups

    @property
    def color(self) -> Tuple[int, int, int]:
        return self.value


@dataclass
class Player:
    """Player state.

    (x, y) is the top-left corner of the bounding box.
    """
    x: float
    y: float
    width: float = 30.0
    height: float = 40.0
    vx: float = 0.0
    vy: float = 0.0
    facing: int = 1  # 1 = right, -1 = left
    grounded: bool = False

    # Per-tick timers
    step_timer: int = 0
    blink_timer: int = 0
    jump_held: bool = False  # Jump input state on the previous tick

    @property
    def position(self) -> Tuple[float, float]:
        """Top-left corner (x, y)."""
        return self.x, self.y

    @property
    def velocity(self) -> Tuple[float, float]:
        """Current velocity (vx, vy)."""
        return self.vx, self.vy

    @property
    def center(self) -> Tuple[float, float]:
        """Centre of the bounding box."""
        return self.x + self.width / 2, self.y + self.height / 2

    @property
    def bottom(self) -> float:
        """Lower edge."""
        return self.y + self.height

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Get (left, top, right, bottom) bounds."""
        return self.x, self.y, self.x + self.width, self.y + self.height


@dataclass
class Treasure:
    """Collectible treasure anchored at (x, y)."""
    x: float
    y: float
    kind: TreasureKind
    value: Optional[int] = None
    collected: bool = False

    def __post_init__(self):
        if self.value is None:
            self.value = self.kind.points

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y


@dataclass(frozen=True)
class Platform:
    """Static one-way platform. (x, y) is the top-left corner."""
    x: float
    y: float
    width: float
    height: float = 20.0

    @property
    def top(self) -> float:
        return self.y

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Get (left, top, right, bottom) bounds."""
        return self.x, self.y, self.x + self.width, self.y + self.height


@dataclass
class Particle:
    """Short-lived visual particle. life runs from 1.0 down to 0."""
    x: float
    y: float
    vx: float
    vy: float
    kind: ParticleKind
    life: float = 1.0
    decay: float = 0.02
    size: float = 2.0

    @property
    def alive(self) -> bool:
        return self.life > LIFE_EPSILON
