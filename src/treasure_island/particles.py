"""Particle system for jump dust and pickup sparkles.

Particles are purely visual: they never collide and nothing reads them
except the snapshot. Each tick every particle moves by its velocity, picks up
a little gravity and loses `decay` life; expired particles are dropped before
the next snapshot is taken.
"""

from typing import List, Optional, Tuple

import numpy as np

from .config import ParticleConfig
from .entities import Particle, ParticleKind


class ParticleSystem:
    """Owns the set of live particles."""

    def __init__(
        self,
        config: Optional[ParticleConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """Create an empty particle system.

        Args:
            config: Lifetime and burst parameters. Uses defaults if None.
            rng: Source of burst jitter. A fresh default_rng() if None.
        """
        self.config = config or ParticleConfig()
        self.rng = rng or np.random.default_rng()
        self._particles: List[Particle] = []

    @property
    def particles(self) -> Tuple[Particle, ...]:
        """Live particles, oldest first."""
        return tuple(self._particles)

    def __len__(self) -> int:
        return len(self._particles)

    def spawn(
        self,
        position: Tuple[float, float],
        velocity: Tuple[float, float],
        kind: ParticleKind,
        life: Optional[float] = None,
        size: Optional[float] = None,
    ) -> Particle:
        """Add one particle.

        Args:
            position: Starting (x, y).
            velocity: Per-tick (vx, vy).
            kind: Visual category.
            life: Starting life in (0, 1], 1.0 if None.
            size: Radius in pixels, random within SIZE_RANGE if None.

        Returns:
            The new particle.

        Raises:
            ValueError: If life is outside (0, 1].
        """
        if life is not None and not 0.0 < life <= 1.0:
            raise ValueError(f"Particle life must be in (0, 1], got {life}")
        if size is None:
            size = float(self.rng.uniform(*ParticleConfig.SIZE_RANGE))
        particle = Particle(
            x=float(position[0]),
            y=float(position[1]),
            vx=float(velocity[0]),
            vy=float(velocity[1]),
            kind=kind,
            life=1.0 if life is None else float(life),
            decay=self.config.decay,
            size=size,
        )
        self._particles.append(particle)
        return particle

    def burst(
        self,
        kind: ParticleKind,
        origin: Tuple[float, float],
        count: int,
        spread: Tuple[float, float] = (0.0, 0.0),
        speed: float = 1.0,
        upward: bool = False,
    ) -> List[Particle]:
        """Spawn `count` particles jittered around `origin`.

        Args:
            kind: Visual category.
            origin: Centre of the spawn box.
            count: Number of particles.
            spread: Half-extents (dx, dy) of the spawn box.
            speed: Max |vx|, and max |vy| (or max upward speed if `upward`).
            upward: Only give particles upward (negative) vy.
        """
        ox, oy = origin
        sx, sy = spread
        offsets = self.rng.uniform(-1.0, 1.0, size=(count, 2))
        vx = self.rng.uniform(-speed, speed, size=count)
        if upward:
            vy = self.rng.uniform(-speed, 0.0, size=count)
        else:
            vy = self.rng.uniform(-speed, speed, size=count)

        return [
            self.spawn(
                (ox + offsets[i, 0] * sx, oy + offsets[i, 1] * sy),
                (vx[i], vy[i]),
                kind,
            )
            for i in range(count)
        ]

    def update(self) -> int:
        """Advance every particle by one tick and drop the expired ones.

        Returns:
            Number of particles removed.
        """
        gravity = self.config.gravity
        for p in self._particles:
            p.x += p.vx
            p.y += p.vy
            p.vy += gravity
            p.life -= p.decay

        before = len(self._particles)
        self._particles = [p for p in self._particles if p.alive]
        return before - len(self._particles)

    def clear(self) -> None:
        """Remove all particles."""
        self._particles = []
