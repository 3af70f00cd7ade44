"""Tests for configuration groups and presets."""

import pytest

from treasure_island.config import (
    PhysicsConfig,
    WorldConfig,
    ParticleConfig,
    AudioConfig,
    GameConfig,
    CONFIGS,
    get_config,
)
from treasure_island.entities import TreasureKind


class TestPhysicsConfig:
    def test_defaults(self):
        config = PhysicsConfig()
        assert config.gravity == 0.5
        assert config.friction == 0.8
        assert config.move_speed == 3.0
        assert config.jump_impulse == 12.0
        assert config.player_start == (100.0, 220.0)

    def test_friction_below_one(self):
        """Friction must decay velocity, not amplify it."""
        assert 0 < PhysicsConfig().friction < 1

    def test_to_dict_from_dict(self):
        config = PhysicsConfig(gravity=0.7, move_speed=5.0, player_start=(10.0, 20.0))
        restored = PhysicsConfig.from_dict(config.to_dict())
        assert restored == config

    def test_from_dict_missing_keys_use_defaults(self):
        config = PhysicsConfig.from_dict({"gravity": 0.9})
        assert config.gravity == 0.9
        assert config.jump_impulse == 12.0


class TestWorldConfig:
    def test_default_layout(self):
        world = WorldConfig()
        assert world.ground_y == 260.0
        assert world.platforms == [(480.0, 200.0, 60.0, 20.0)]
        assert [kind for _, _, kind in world.treasures] == [
            TreasureKind.COIN, TreasureKind.GEM, TreasureKind.CROWN,
        ]

    def test_default_lists_not_shared(self):
        a = WorldConfig()
        b = WorldConfig()
        a.treasures.append((1.0, 1.0, TreasureKind.COIN))
        assert len(b.treasures) == 3

    def test_treasure_kinds_serialized_by_name(self):
        d = WorldConfig().to_dict()
        assert d["treasures"][0] == [200.0, 240.0, "coin"]

    def test_round_trip(self):
        world = WorldConfig.from_dict(WorldConfig().to_dict())
        assert world.treasures == WorldConfig().treasures

    def test_unknown_treasure_kind(self):
        with pytest.raises(ValueError, match="Unknown treasure kind"):
            WorldConfig.from_dict({"treasures": [[0, 0, "ruby"]]})


class TestParticleConfig:
    def test_lifetime_is_fifty_ticks(self):
        config = ParticleConfig()
        assert round(1.0 / config.decay) == 50

    def test_particle_gravity_lighter_than_player(self):
        assert ParticleConfig().gravity < PhysicsConfig().gravity

    def test_size_range(self):
        lo, hi = ParticleConfig.SIZE_RANGE
        assert 0 < lo < hi

    @pytest.mark.parametrize("decay", [0.0, -0.02])
    def test_non_positive_decay_rejected(self, decay):
        with pytest.raises(ValueError, match="decay"):
            ParticleConfig(decay=decay)

    def test_from_dict_validates(self):
        with pytest.raises(ValueError):
            ParticleConfig.from_dict({"decay": 0})


class TestAudioConfig:
    def test_beat_duration(self):
        assert AudioConfig(tempo=120).beat_duration == pytest.approx(0.5)
        assert AudioConfig(tempo=60).beat_duration == pytest.approx(1.0)

    def test_gains(self):
        config = AudioConfig()
        assert (config.master_gain, config.music_gain, config.sfx_gain) == (0.7, 0.3, 0.5)

    @pytest.mark.parametrize("tempo", [0, -60.0])
    def test_non_positive_tempo_rejected(self, tempo):
        with pytest.raises(ValueError, match="Tempo"):
            AudioConfig(tempo=tempo)

    def test_from_dict_validates(self):
        with pytest.raises(ValueError, match="Tempo"):
            AudioConfig.from_dict({"tempo": 0})


class TestGameConfig:
    def test_defaults(self):
        config = GameConfig()
        assert config.pickup_radius == 25.0
        assert config.fps == 60

    def test_to_dict_from_dict(self):
        config = GameConfig(pickup_radius=30.0, seed=7)
        restored = GameConfig.from_dict(config.to_dict())
        assert restored.pickup_radius == 30.0
        assert restored.seed == 7
        assert restored.physics == config.physics


class TestPresets:
    def test_presets_exist(self):
        assert "default" in CONFIGS
        assert "lagoon" in CONFIGS

    def test_default_preset_matches_defaults(self):
        assert get_config("default").physics == PhysicsConfig()

    def test_lagoon_is_complete_variant(self):
        config = get_config("lagoon")
        assert config.world.ground_y == 340.0
        assert config.physics.move_speed == 4.0
        assert config.physics.gravity == 0.6
        assert config.world.platforms == [(320.0, 280.0, 60.0, 20.0)]
        assert len(config.world.treasures) == 4
        assert config.pickup_radius == 20.0

    def test_get_config_returns_copy(self):
        config = get_config("default")
        config.physics.gravity = 99.0
        assert CONFIGS["default"].physics.gravity == 0.5

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="Unknown preset"):
            get_config("volcano")

    def test_player_starts_inside_world(self):
        for name, config in CONFIGS.items():
            x, _ = config.physics.player_start
            assert 0 <= x <= config.world.width - config.physics.player_width, name
