"""Simulation controller: the one owner of all mutable game state.

Each tick() runs, in order:

1. Read the input snapshot (restart short-circuits the tick)
2. Physics & collision update of the player
3. Treasure pickup scan
4. Particle integration and reaping, then bursts for this tick's events
5. Effect events forwarded to the audio sequencer and subscribers
6. Win check, tick counter, snapshot publish

Renderers and tests only ever see GameSnapshot objects, which are frozen
copies; nothing they hold aliases live state.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, List, Optional, Tuple

import numpy as np

from .audio import AudioSequencer
from .collectibles import CollectibleDetector
from .config import GameConfig
from .entities import ParticleKind, Platform, Player, Treasure, TreasureKind
from .events import EffectEvent, InputSnapshot
from .particles import ParticleSystem
from .physics import PhysicsWorld

logger = logging.getLogger(__name__)

EventListener = Callable[[EffectEvent], None]


class GameState(Enum):
    PLAYING = auto()
    WON = auto()


@dataclass(frozen=True)
class PlayerView:
    """Player pose and animation phase."""
    x: float
    y: float
    width: float
    height: float
    vx: float
    vy: float
    facing: int
    grounded: bool
    blinking: bool

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2


@dataclass(frozen=True)
class TreasureView:
    x: float
    y: float
    kind: TreasureKind
    value: int
    collected: bool


@dataclass(frozen=True)
class ParticleView:
    x: float
    y: float
    kind: ParticleKind
    life: float
    size: float


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of one tick's outcome."""
    tick: int
    state: GameState
    score: int
    player: PlayerView
    treasures: Tuple[TreasureView, ...]
    particles: Tuple[ParticleView, ...]
    platforms: Tuple[Platform, ...]
    events: Tuple[EffectEvent, ...] = ()  # Raised during this tick

    @property
    def won(self) -> bool:
        return self.state is GameState.WON

    @property
    def collected_count(self) -> int:
        return sum(1 for t in self.treasures if t.collected)

    @property
    def total(self) -> int:
        return len(self.treasures)


@dataclass
class _Session:
    """Everything restart replaces."""
    player: Player
    treasures: List[Treasure]
    particles: ParticleSystem
    score: int = 0
    tick: int = 0
    state: GameState = GameState.PLAYING


class SimulationController:
    """Advances the game one tick at a time and manages Playing/Won/Restart."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        audio: Optional[AudioSequencer] = None,
        seed: Optional[int] = None,
    ):
        """Initialize the controller with a fresh session.

        Args:
            config: Game configuration. Uses defaults if None.
            audio: Sequencer that receives effect events. Events are only
                delivered to subscribers if None.
            seed: Seed for particle jitter. Uses config.seed if None.
        """
        self.config = config or GameConfig()
        self.audio = audio
        self.rng = np.random.default_rng(self.config.seed if seed is None else seed)

        self.physics = PhysicsWorld(self.config.physics, self.config.world)
        self.detector = CollectibleDetector(self.config.pickup_radius)
        self._listeners: List[EventListener] = []

        self._session = self._new_session()
        self._snapshot = self._build_snapshot(())

    # --- Queries ---

    @property
    def platforms(self) -> Tuple[Platform, ...]:
        return self.physics.platforms

    @property
    def state(self) -> GameState:
        return self._session.state

    @property
    def score(self) -> int:
        return self._session.score

    @property
    def tick_count(self) -> int:
        return self._session.tick

    def snapshot(self) -> GameSnapshot:
        """Most recently published snapshot."""
        return self._snapshot

    # --- Event subscription ---

    def subscribe(self, listener: EventListener) -> None:
        """Call `listener(event)` for every effect event, in emission order."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # --- Transitions ---

    def tick(self, intent=None) -> GameSnapshot:
        """Advance exactly one simulation step.

        Args:
            intent: InputSnapshot, mapping of intent flags, or None (idle).

        Returns:
            The snapshot published for this tick.
        """
        intent = InputSnapshot.coerce(intent)
        if intent.restart:
            return self.restart()

        session = self._session
        player = session.player
        events: List[EffectEvent] = []
        collected: List[Treasure] = []
        won_now = False
        feet = (player.center[0], player.bottom)  # Dust spawns where the jump started

        if session.state is GameState.PLAYING:
            events.extend(self.physics.step(player, intent))

            pickup = self.detector.scan(
                player, session.treasures, already_won=session.state is GameState.WON
            )
            session.score += pickup.score_delta
            collected = pickup.collected
            events.extend(pickup.events)
            won_now = pickup.won

        session.particles.update()
        self._spawn_effects(session, events, feet, collected)

        if won_now:
            session.state = GameState.WON
            logger.info("All %d treasures collected, score %d", len(session.treasures), session.score)

        session.tick += 1
        self._snapshot = self._build_snapshot(tuple(events))
        self._emit(events)
        return self._snapshot

    def restart(self) -> GameSnapshot:
        """Start a new session. Accepted in any state; platforms are kept.

        The new session is built completely before it replaces the old one,
        so no partially reset snapshot is ever published.
        """
        fresh = self._new_session()
        snapshot = self._build_snapshot((), fresh)

        self._session = fresh
        self._snapshot = snapshot
        if self.audio is not None:
            self.audio.cancel_effects()
        logger.info("Session restarted")
        return snapshot

    # --- Internals ---

    def _new_session(self) -> _Session:
        treasures = [Treasure(x, y, kind) for x, y, kind in self.config.world.treasures]
        return _Session(
            player=self.physics.create_player(),
            treasures=treasures,
            particles=ParticleSystem(self.config.particles, self.rng),
        )

    def _spawn_effects(
        self,
        session: _Session,
        events: List[EffectEvent],
        feet: Tuple[float, float],
        collected: List[Treasure],
    ) -> None:
        cfg = self.config.particles
        if EffectEvent.JUMP in events:
            session.particles.burst(
                ParticleKind.DUST,
                feet,
                cfg.jump_burst,
                spread=(session.player.width * cfg.jump_spread / 2, 0.0),
                speed=cfg.jump_speed,
                upward=True,
            )
        for treasure in collected:
            session.particles.burst(
                ParticleKind.SPARKLE,
                treasure.position,
                cfg.collect_burst,
                spread=(cfg.collect_spread, cfg.collect_spread),
                speed=cfg.collect_speed,
            )

    def _emit(self, events: List[EffectEvent]) -> None:
        for event in events:
            if self.audio is not None:
                self.audio.trigger(event)
            for listener in list(self._listeners):
                listener(event)

    def _build_snapshot(
        self, events: Tuple[EffectEvent, ...], session: Optional[_Session] = None
    ) -> GameSnapshot:
        s = session or self._session
        p = s.player
        return GameSnapshot(
            tick=s.tick,
            state=s.state,
            score=s.score,
            player=PlayerView(
                x=p.x,
                y=p.y,
                width=p.width,
                height=p.height,
                vx=p.vx,
                vy=p.vy,
                facing=p.facing,
                grounded=p.grounded,
                blinking=self.physics.is_blinking(p),
            ),
            treasures=tuple(
                TreasureView(t.x, t.y, t.kind, t.value, t.collected) for t in s.treasures
            ),
            particles=tuple(
                ParticleView(q.x, q.y, q.kind, q.life, q.size) for q in s.particles.particles
            ),
            platforms=self.physics.platforms,
            events=events,
        )
