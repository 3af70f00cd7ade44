"""Tests for entity records."""

import pytest

from treasure_island.entities import (
    LIFE_EPSILON,
    Particle,
    ParticleKind,
    Platform,
    Player,
    Treasure,
    TreasureKind,
)


class TestTreasureKind:
    def test_points(self):
        assert TreasureKind.COIN.points == 100
        assert TreasureKind.GEM.points == 200
        assert TreasureKind.CROWN.points == 300

    def test_colors_are_rgb(self):
        for kind in TreasureKind:
            assert len(kind.color) == 3
            assert all(0 <= c <= 255 for c in kind.color)

    def test_from_name_case_insensitive(self):
        assert TreasureKind.from_name("gem") is TreasureKind.GEM
        assert TreasureKind.from_name("CROWN") is TreasureKind.CROWN

    def test_from_name_unknown(self):
        with pytest.raises(ValueError):
            TreasureKind.from_name("pearl")


class TestPlayer:
    def test_center_and_bottom(self):
        player = Player(x=100, y=220)
        assert player.center == (115, 240)
        assert player.bottom == 260

    def test_bounds(self):
        player = Player(x=10, y=20, width=30, height=40)
        assert player.bounds == (10, 20, 40, 60)

    def test_initial_state(self):
        player = Player(x=0, y=0)
        assert player.velocity == (0.0, 0.0)
        assert player.facing == 1
        assert not player.grounded
        assert not player.jump_held


class TestTreasure:
    def test_value_defaults_from_kind(self):
        assert Treasure(0, 0, TreasureKind.GEM).value == 200

    def test_explicit_value(self):
        assert Treasure(0, 0, TreasureKind.COIN, value=5).value == 5

    def test_starts_uncollected(self):
        assert not Treasure(0, 0, TreasureKind.COIN).collected


class TestPlatform:
    def test_bounds(self):
        plat = Platform(480, 200, 60, 20)
        assert plat.top == 200
        assert plat.bounds == (480, 200, 540, 220)

    def test_immutable(self):
        plat = Platform(480, 200, 60)
        with pytest.raises(AttributeError):
            plat.x = 0


class TestParticle:
    def test_alive(self):
        assert Particle(0, 0, 0, 0, ParticleKind.DUST).alive

    def test_dead_at_zero_and_within_epsilon(self):
        assert not Particle(0, 0, 0, 0, ParticleKind.DUST, life=0.0).alive
        assert not Particle(0, 0, 0, 0, ParticleKind.DUST, life=LIFE_EPSILON / 2).alive
