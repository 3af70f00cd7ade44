"""Player physics and collision resolution.

One call to PhysicsWorld.step() advances the player by exactly one tick:

1. Horizontal input sets vx directly; with no input vx decays by friction.
2. A newly pressed jump while grounded sets vy to the jump impulse.
3. Gravity is added to vy, then position += velocity (semi-implicit Euler).
4. x is clamped to the world, then platforms and finally the ground are
   resolved. The ground is checked last so it wins when both apply.

Units are pixels and ticks; y grows downward.
"""

from typing import List, Optional, Sequence

from .config import PhysicsConfig, WorldConfig
from .entities import Player, Platform
from .events import EffectEvent, InputSnapshot


class PhysicsWorld:
    """Integrates the player against a static ground line and platforms."""

    def __init__(
        self,
        config: Optional[PhysicsConfig] = None,
        world: Optional[WorldConfig] = None,
        platforms: Optional[Sequence[Platform]] = None,
    ):
        """Initialize physics world.

        Args:
            config: Movement constants. Uses defaults if None.
            world: Bounds and ground line. Uses defaults if None.
            platforms: Static platforms. Built from world.platforms if None.
        """
        self.config = config or PhysicsConfig()
        self.world = world or WorldConfig()
        if platforms is None:
            platforms = [Platform(*p) for p in self.world.platforms]
        self.platforms = tuple(platforms)

    def create_player(self) -> Player:
        """Player at the configured start, at rest.

        The player starts grounded if its lower edge is exactly on the ground
        line or on top of a platform.
        """
        x, y = self.config.player_start
        player = Player(
            x=x,
            y=y,
            width=self.config.player_width,
            height=self.config.player_height,
        )
        player.grounded = self._supported(player)
        return player

    def _supported(self, player: Player) -> bool:
        """Whether the lower edge rests exactly on the ground or a platform top."""
        if player.bottom == self.world.ground_y:
            return True
        return any(
            player.bottom == platform.top
            and player.x + player.width > platform.x
            and player.x < platform.x + platform.width
            for platform in self.platforms
        )

    def step(self, player: Player, intent: InputSnapshot) -> List[EffectEvent]:
        """Advance the player by one tick.

        Args:
            player: Player state, updated in place.
            intent: This tick's input.

        Returns:
            Effect events raised by the movement (JUMP, STEP).
        """
        events: List[EffectEvent] = []
        cfg = self.config

        self._apply_horizontal_input(player, intent)

        if abs(player.vx) > cfg.step_speed_threshold and player.grounded:
            player.step_timer += 1
            if player.step_timer > cfg.step_interval:
                events.append(EffectEvent.STEP)
                player.step_timer = 0

        # Edge-triggered: holding jump through a landing does not re-jump
        if intent.jump and not player.jump_held and player.grounded:
            player.vy = -cfg.jump_impulse
            player.grounded = False
            events.append(EffectEvent.JUMP)
        player.jump_held = intent.jump

        player.vy += cfg.gravity
        player.x += player.vx
        player.y += player.vy

        self._clamp_to_world(player)
        self._resolve_collisions(player)

        player.blink_timer = (player.blink_timer + 1) % cfg.blink_period
        return events

    def _apply_horizontal_input(self, player: Player, intent: InputSnapshot) -> None:
        if intent.move_left:
            player.vx = -self.config.move_speed
            player.facing = -1
        elif intent.move_right:
            player.vx = self.config.move_speed
            player.facing = 1
        else:
            player.vx *= self.config.friction

    def _clamp_to_world(self, player: Player) -> None:
        max_x = self.world.width - player.width
        player.x = max(0.0, min(max_x, player.x))

    def _resolve_collisions(self, player: Player) -> None:
        player.grounded = False

        for platform in self.platforms:
            if self._lands_on(player, platform):
                player.y = platform.top - player.height
                player.vy = 0.0
                player.grounded = True

        if player.bottom >= self.world.ground_y:
            player.y = self.world.ground_y - player.height
            player.vy = 0.0
            player.grounded = True

    def _lands_on(self, player: Player, platform: Platform) -> bool:
        """Whether a descending player's feet are inside the platform's top band."""
        if player.vy <= 0:
            return False
        left, top, right, bottom = platform.bounds
        if not (player.x + player.width > left and player.x < right):
            return False
        return top < player.bottom < bottom + self.world.platform_tolerance

    def is_blinking(self, player: Player) -> bool:
        """Whether the blink animation is in its closed-eye phase."""
        return player.blink_timer < self.config.blink_duration
