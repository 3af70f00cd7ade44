"""Tests for player physics and collision resolution."""

import pytest

from treasure_island.config import PhysicsConfig, WorldConfig
from treasure_island.entities import Platform, Player
from treasure_island.events import EffectEvent, InputSnapshot
from treasure_island.physics import PhysicsWorld

LEFT = InputSnapshot(move_left=True)
RIGHT = InputSnapshot(move_right=True)
JUMP = InputSnapshot(jump=True)
IDLE = InputSnapshot()


def settled_player(physics):
    """Player standing on the ground after one idle tick."""
    player = physics.create_player()
    physics.step(player, IDLE)
    assert player.grounded
    return player


class TestHorizontalMovement:
    def test_move_right_sets_speed(self, physics):
        player = settled_player(physics)
        physics.step(player, RIGHT)
        assert player.vx == 3.0
        assert player.facing == 1

    def test_move_left_sets_speed_and_facing(self, physics):
        player = settled_player(physics)
        physics.step(player, LEFT)
        assert player.vx == -3.0
        assert player.facing == -1

    def test_left_wins_when_both_held(self, physics):
        player = settled_player(physics)
        physics.step(player, InputSnapshot(move_left=True, move_right=True))
        assert player.vx == -3.0

    def test_friction_decays_without_input(self, physics):
        player = settled_player(physics)
        physics.step(player, RIGHT)
        physics.step(player, IDLE)
        assert player.vx == pytest.approx(2.4)

    def test_friction_never_zeroes_exactly(self, physics):
        player = settled_player(physics)
        physics.step(player, RIGHT)
        for _ in range(100):
            physics.step(player, IDLE)
        assert 0 < player.vx < 1e-6

    def test_position_integrates_velocity(self, physics):
        player = settled_player(physics)
        x0 = player.x
        physics.step(player, RIGHT)
        assert player.x == pytest.approx(x0 + 3.0)


class TestBoundaries:
    def test_clamped_at_left_edge(self, physics):
        player = Player(x=0.0, y=220.0)
        physics.step(player, LEFT)
        assert player.x == 0.0
        assert player.vx < 0

    def test_clamped_at_right_edge(self, physics):
        player = Player(x=770.0, y=220.0)
        physics.step(player, RIGHT)
        assert player.x == 770.0

    def test_always_within_bounds(self, physics):
        player = physics.create_player()
        for i in range(400):
            intent = LEFT if (i // 100) % 2 else RIGHT
            physics.step(player, intent)
            assert 0 <= player.x <= physics.world.width - player.width


class TestGravityAndGround:
    def test_gravity_accumulates(self, physics):
        player = Player(x=100.0, y=0.0)
        physics.step(player, IDLE)
        assert player.vy == pytest.approx(0.5)
        physics.step(player, IDLE)
        assert player.vy == pytest.approx(1.0)

    def test_spawns_grounded(self, physics):
        player = physics.create_player()
        assert player.grounded
        physics.step(player, IDLE)
        assert player.grounded
        assert player.y == 220.0
        assert player.vy == 0.0

    def test_spawns_grounded_on_platform(self):
        physics = PhysicsWorld(PhysicsConfig(player_start=(490.0, 160.0)))
        assert physics.create_player().grounded

    def test_spawn_in_air_not_grounded(self):
        physics = PhysicsWorld(PhysicsConfig(player_start=(100.0, 100.0)))
        player = physics.create_player()
        assert not player.grounded
        physics.step(player, IDLE)
        assert not player.grounded

    def test_lands_from_air(self, physics):
        player = Player(x=100.0, y=215.0)
        physics.step(player, IDLE)
        assert not player.grounded
        for _ in range(5):
            physics.step(player, IDLE)
        assert player.grounded
        assert player.y == 220.0
        assert player.vy == 0.0

    def test_resting_player_stays_exactly_on_ground(self, physics):
        player = settled_player(physics)
        for _ in range(10):
            physics.step(player, IDLE)
            assert player.bottom == physics.world.ground_y
            assert player.grounded

    def test_falls_from_height(self, physics):
        player = Player(x=100.0, y=0.0)
        for _ in range(200):
            physics.step(player, IDLE)
        assert player.grounded
        assert player.bottom == 260.0


class TestJump:
    def test_jump_from_ground(self, physics):
        player = settled_player(physics)
        events = physics.step(player, JUMP)
        assert EffectEvent.JUMP in events
        assert player.vy == pytest.approx(-11.5)
        assert not player.grounded
        assert player.y < 220.0

    def test_jump_on_first_step(self, physics):
        player = physics.create_player()
        events = physics.step(player, JUMP)
        assert EffectEvent.JUMP in events
        assert player.vy == pytest.approx(-11.5)

    def test_no_jump_in_air(self, physics):
        player = Player(x=100.0, y=0.0)
        events = physics.step(player, JUMP)
        assert EffectEvent.JUMP not in events
        assert player.vy > 0

    def test_holding_jump_only_jumps_once(self, physics):
        player = settled_player(physics)
        jumps = 0
        for _ in range(200):
            jumps += physics.step(player, JUMP).count(EffectEvent.JUMP)
        assert jumps == 1
        assert player.grounded

    def test_release_and_press_jumps_again(self, physics):
        player = settled_player(physics)
        physics.step(player, JUMP)
        while not player.grounded:
            physics.step(player, IDLE)
        events = physics.step(player, JUMP)
        assert EffectEvent.JUMP in events

    def test_jump_returns_to_ground(self, physics):
        player = settled_player(physics)
        physics.step(player, JUMP)
        ticks = 1
        while not player.grounded:
            physics.step(player, IDLE)
            ticks += 1
        # Apex at 12 / 0.5 ticks, same again to come down
        assert 45 <= ticks <= 50
        assert player.y == 220.0


class TestPlatforms:
    def test_lands_on_platform_from_above(self, physics):
        player = Player(x=490.0, y=150.0, vy=5.0)
        for _ in range(10):
            physics.step(player, IDLE)
            if player.grounded:
                break
        assert player.grounded
        assert player.bottom == 200.0
        assert player.vy == 0.0

    def test_passes_through_when_rising(self, physics):
        # Feet inside the platform band but moving upward
        player = Player(x=490.0, y=170.0, vy=-8.0)
        physics.step(player, IDLE)
        assert not player.grounded
        assert player.bottom > 200.0

    def test_no_landing_outside_horizontal_span(self, physics):
        player = Player(x=600.0, y=150.0, vy=5.0)
        for _ in range(3):
            physics.step(player, IDLE)
        assert not player.grounded

    def test_tolerance_band(self):
        world = WorldConfig(platform_tolerance=0.0)
        physics = PhysicsWorld(world=world)
        # Feet land 25px into a 20px platform: outside the band with no tolerance
        player = Player(x=490.0, y=184.5, vy=0.0)
        physics.step(player, IDLE)
        assert not player.grounded

    def test_ground_resolved_last(self):
        # A platform below the ground line: ground snap must win
        physics = PhysicsWorld(platforms=[Platform(0.0, 270.0, 800.0, 20.0)])
        player = Player(x=100.0, y=234.0, vy=0.5)
        physics.step(player, IDLE)
        assert player.grounded
        assert player.bottom == 260.0

    def test_custom_platforms(self):
        physics = PhysicsWorld(platforms=[Platform(0.0, 100.0, 200.0)])
        assert len(physics.platforms) == 1
        assert physics.platforms[0].height == 20.0


class TestStepCadence:
    def test_step_event_every_interval(self, physics):
        player = settled_player(physics)
        steps = []
        for tick in range(1, 43):
            if EffectEvent.STEP in physics.step(player, RIGHT):
                steps.append(tick)
        assert steps == [21, 42]

    def test_step_fires_one_tick_after_interval(self):
        physics = PhysicsWorld(PhysicsConfig(step_interval=5))
        player = physics.create_player()
        steps = [
            tick for tick in range(1, 19)
            if EffectEvent.STEP in physics.step(player, RIGHT)
        ]
        assert steps == [6, 12, 18]

    def test_no_steps_when_standing(self, physics):
        player = settled_player(physics)
        for _ in range(60):
            assert EffectEvent.STEP not in physics.step(player, IDLE)

    def test_no_steps_in_air(self, physics):
        player = Player(x=100.0, y=0.0)
        for _ in range(30):
            assert EffectEvent.STEP not in physics.step(player, RIGHT)


class TestBlink:
    def test_blink_cycle(self, physics):
        player = settled_player(physics)
        config = PhysicsConfig()
        seen = []
        for _ in range(config.blink_period):
            physics.step(player, IDLE)
            seen.append(physics.is_blinking(player))
        assert sum(seen) == config.blink_duration

    def test_blink_timer_wraps(self, physics):
        player = physics.create_player()
        for _ in range(180):
            physics.step(player, IDLE)
        assert player.blink_timer == 0
