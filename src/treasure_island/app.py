"""pygame host: keyboard in, shapes and sound out.

Everything here is a collaborator of the simulation core. The core never
imports this module; it only sees InputSnapshots and hands back GameSnapshots
and effect events.

Controls:
    Left/Right or A/D   move
    Up, W or Space      jump
    R                   restart
    M / N               toggle music / sound effects
    Esc                 quit
"""

import argparse
import logging
import math
from typing import Optional, Sequence, Tuple

import pygame

from .audio import AudioSequencer
from .config import CONFIGS, GameConfig, get_config
from .engine import GameSnapshot, SimulationController
from .entities import ParticleKind
from .events import InputSnapshot
from .synth import MixerBackend

logger = logging.getLogger(__name__)


# Colors (RGB)
COLOR_SKY = (135, 206, 235)
COLOR_SEA = (30, 144, 255)
COLOR_SAND = (238, 214, 175)
COLOR_PLATFORM = (139, 90, 43)
COLOR_PLAYER = (220, 60, 50)
COLOR_EYE = (255, 255, 255)
COLOR_PUPIL = (20, 20, 20)
COLOR_TEXT = (255, 255, 255)
COLOR_SCORE = (255, 215, 0)
COLOR_PANEL = (0, 0, 0)

LEFT_KEYS = (pygame.K_LEFT, pygame.K_a)
RIGHT_KEYS = (pygame.K_RIGHT, pygame.K_d)
JUMP_KEYS = (pygame.K_UP, pygame.K_w, pygame.K_SPACE)

# Treasures bob around their anchor; pickup distance ignores this
BOB_AMPLITUDE = 3.0
BOB_RATE = 0.05


def intent_from_keys(pressed, restart: bool = False) -> InputSnapshot:
    """Map held keys to an input snapshot.

    Args:
        pressed: Anything indexable by pygame key code, such as the result of
            pygame.key.get_pressed().
        restart: Whether restart was requested this frame.
    """
    return InputSnapshot(
        move_left=any(bool(pressed[k]) for k in LEFT_KEYS),
        move_right=any(bool(pressed[k]) for k in RIGHT_KEYS),
        jump=any(bool(pressed[k]) for k in JUMP_KEYS),
        restart=bool(restart),
    )


def bob_offset(tick: int, x: float) -> float:
    """Vertical draw offset of a treasure at `x` on `tick`."""
    return math.sin(tick * BOB_RATE + x * 0.01) * BOB_AMPLITUDE


def draw_scene(surface: pygame.Surface, snapshot: GameSnapshot, ground_y: float) -> None:
    """Draw world, treasures, particles and player for one snapshot (no text)."""
    width, height = surface.get_size()
    surface.fill(COLOR_SKY)

    # Sea strip behind the beach, then sand below the ground line
    pygame.draw.rect(surface, COLOR_SEA, (0, int(ground_y) - 30, width, 30))
    pygame.draw.rect(surface, COLOR_SAND, (0, int(ground_y), width, height - int(ground_y)))

    for plat in snapshot.platforms:
        left, top, right, bottom = plat.bounds
        pygame.draw.rect(
            surface, COLOR_PLATFORM,
            (int(left), int(top), int(right - left), int(bottom - top))
        )

    for t in snapshot.treasures:
        if t.collected:
            continue
        cx = int(t.x)
        cy = int(t.y + bob_offset(snapshot.tick, t.x))
        pygame.draw.circle(surface, t.kind.color, (cx, cy), 8)
        pygame.draw.circle(surface, COLOR_PUPIL, (cx, cy), 8, width=1)

    for p in snapshot.particles:
        # Fade toward the sky colour as life runs out
        color = tuple(
            int(sky + (c - sky) * max(0.0, min(1.0, p.life)))
            for c, sky in zip(p.kind.color, COLOR_SKY)
        )
        radius = max(1, int(round(p.size)))
        if p.kind is ParticleKind.SPARKLE:
            pygame.draw.rect(surface, color, (int(p.x) - radius, int(p.y), radius * 2, 1))
            pygame.draw.rect(surface, color, (int(p.x), int(p.y) - radius, 1, radius * 2))
        else:
            pygame.draw.circle(surface, color, (int(p.x), int(p.y)), radius)

    player = snapshot.player
    pygame.draw.rect(
        surface, COLOR_PLAYER,
        (int(player.x), int(player.y), int(player.width), int(player.height))
    )
    # Eyes on the facing side; closed while blinking
    eye_x = int(player.x + player.width / 2 + player.facing * player.width / 4)
    eye_y = int(player.y + player.height / 4)
    if player.blinking:
        pygame.draw.line(surface, COLOR_PUPIL, (eye_x - 3, eye_y), (eye_x + 3, eye_y), 2)
    else:
        pygame.draw.circle(surface, COLOR_EYE, (eye_x, eye_y), 4)
        pygame.draw.circle(surface, COLOR_PUPIL, (eye_x + player.facing, eye_y), 2)


class TreasureIslandApp:
    """Window, input polling, drawing and sound around a SimulationController."""

    def __init__(self, config: Optional[GameConfig] = None):
        """Initialize pygame, audio and the simulation.

        Args:
            config: Game configuration. Uses defaults if None.
        """
        self.config = config or GameConfig()

        pygame.init()
        world = self.config.world
        self.screen = pygame.display.set_mode((int(world.width), int(world.height)))
        pygame.display.set_caption("Treasure Island")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 28)
        self.big_font = pygame.font.Font(None, 40)

        backend = MixerBackend(sample_rate=self.config.audio.sample_rate)
        self.audio = AudioSequencer(self.config.audio, backend)
        self.controller = SimulationController(self.config, audio=self.audio)

        self.running = False
        self._restart_requested = False
        self._was_won = False

    def handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                # Audio may only start after the first user input
                self.audio.resume()
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_r:
                    self._restart_requested = True
                elif event.key == pygame.K_m:
                    on = self.audio.toggle_music()
                    print(f"Music {'on' if on else 'off'}")
                elif event.key == pygame.K_n:
                    on = self.audio.toggle_sfx()
                    print(f"Sound effects {'on' if on else 'off'}")

    def step(self, pressed) -> GameSnapshot:
        """Advance the simulation and audio clock by one frame."""
        intent = intent_from_keys(pressed, restart=self._restart_requested)
        self._restart_requested = False

        snapshot = self.controller.tick(intent)
        self.audio.update()

        if intent.restart:
            print(f"RESTART: {snapshot.total} treasures hidden")
        elif snapshot.won and not self._was_won:
            print(f"ALL TREASURE FOUND: score {snapshot.score} in {snapshot.tick / self.config.fps:.1f}s")
        self._was_won = snapshot.won
        return snapshot

    def render(self, snapshot: GameSnapshot) -> None:
        """Render current game state."""
        draw_scene(self.screen, snapshot, self.config.world.ground_y)

        pygame.draw.rect(self.screen, COLOR_PANEL, (10, 10, 220, 56))
        pygame.draw.rect(self.screen, COLOR_SCORE, (10, 10, 220, 56), width=2)
        score = self.font.render(f"Score: {snapshot.score}", True, COLOR_SCORE)
        found = self.font.render(
            f"Treasure: {snapshot.collected_count}/{snapshot.total}", True, COLOR_TEXT
        )
        self.screen.blit(score, (20, 16))
        self.screen.blit(found, (20, 40))

        if snapshot.won:
            self._draw_text("You found all the treasure! Press R to play again", COLOR_SCORE)

        pygame.display.flip()

    def _draw_text(self, text: str, color: Tuple[int, int, int]) -> None:
        """Draw centered text on screen."""
        surface = self.big_font.render(text, True, color)
        rect = surface.get_rect(
            center=(int(self.config.world.width) // 2, int(self.config.world.height) // 2)
        )
        self.screen.blit(surface, rect)

    def run(self) -> None:
        """Main game loop."""
        self.running = True
        try:
            while self.running:
                self.handle_events()
                snapshot = self.step(pygame.key.get_pressed())
                self.render(snapshot)
                self.clock.tick(self.config.fps)
        finally:
            logger.info("Shutting down after %d ticks", self.controller.tick_count)
            self.audio.shutdown()
            pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Treasure Island platformer")
    parser.add_argument(
        "--preset", default="default", choices=sorted(CONFIGS),
        help="Named world and physics preset.",
    )
    parser.add_argument("--no-music", action="store_true", help="Start with background music off.")
    parser.add_argument("--no-sfx", action="store_true", help="Start with sound effects off.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for particle effects.")
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> GameConfig:
    """Resolve the preset and apply command-line overrides."""
    config = get_config(args.preset)
    if args.no_music:
        config.audio.music_enabled = False
    if args.no_sfx:
        config.audio.sfx_enabled = False
    if args.seed is not None:
        config.seed = args.seed
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    config = config_from_args(args)
    print(f"Treasure Island: preset '{args.preset}', {len(config.world.treasures)} treasures")
    TreasureIslandApp(config).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
