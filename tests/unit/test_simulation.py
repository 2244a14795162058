"""Unit tests for Simulation and configure()."""

import dataclasses
import logging

import numpy as np
import pytest

from coinsim.core.arena import ArenaConfig
from coinsim.core.errors import ConfigError, InvariantViolation, PlacementError
from coinsim.core.exchange import UniformSplitPolicy
from coinsim.core.simulation import Simulation, SimulationConfig, StepReport, configure


class DropOnePolicy:
    """Loses one coin from the first disk on every exchange."""

    name = "drop_one"
    conserves = False

    def exchange(self, c1, c2, max_coins, rng):
        return max(c1 - 1, 0), c2


def two_disk_sim(policy="uniform_split", coins=(3, 3), **options):
    """Two motionless disks in a 400x400 box."""
    return configure(
        arena=(400.0, 400.0),
        disk_count=2,
        disk_radius=20.0,
        max_coins=8,
        initial_coin_distribution=coins,
        exchange_policy=policy,
        seed=1,
        max_initial_speed=0.0,
        **options,
    )


def force_overlap(sim):
    """Put disks 0 and 1 on top of each other (half overlapping)."""
    sim.disks[0].x, sim.disks[0].y = 100.0, 100.0
    sim.disks[1].x, sim.disks[1].y = 120.0, 100.0


class TestSimulationConfig:
    """Tests for configuration validation."""

    def test_defaults(self):
        cfg = SimulationConfig()
        assert cfg.arena == ArenaConfig()
        assert cfg.initial_coins == (8, 0, 0, 0, 0, 0)
        assert cfg.policy == "uniform_split"
        assert cfg.normalization == "fleet_fraction"
        assert cfg.sample_on_collision is True
        assert cfg.strict_invariants is True
        cfg.validate()

    def test_wrong_distribution_length(self):
        with pytest.raises(ConfigError):
            SimulationConfig(initial_coins=(8, 0, 0)).validate()

    def test_count_above_capacity(self):
        with pytest.raises(ConfigError):
            SimulationConfig(initial_coins=(9, 0, 0, 0, 0, 0)).validate()

    def test_negative_count(self):
        with pytest.raises(ConfigError):
            SimulationConfig(initial_coins=(-1, 0, 0, 0, 0, 0)).validate()

    def test_unknown_policy(self):
        with pytest.raises(ConfigError):
            SimulationConfig(policy="lottery").validate()

    def test_unknown_normalization(self):
        with pytest.raises(ConfigError):
            SimulationConfig(normalization="per_frame").validate()

    def test_policy_instance(self):
        policy = UniformSplitPolicy()
        assert SimulationConfig(policy=policy).resolve_policy() is policy

    def test_policy_object_without_exchange(self):
        with pytest.raises(ConfigError):
            SimulationConfig(policy=object()).validate()


class TestConfigure:
    """Tests for the flat-parameter entry point."""

    def test_builds_simulation(self):
        sim = configure((800, 600), 6, 40, 8, [8, 0, 0, 0, 0, 0], "uniform_split", seed=42)
        assert isinstance(sim, Simulation)
        assert len(sim.disk_snapshot()) == 6
        assert sim.collision_count() == 0
        assert sim.total_coins() == 8

    def test_accepts_arena_config(self, arena):
        sim = configure(arena, 3, 30, 4, [4, 0, 0], seed=1)
        assert sim.arena.width == arena.width
        assert sim.arena.disk_radius == 30
        assert sim.arena.max_coins == 4

    def test_distribution_length_mismatch(self):
        with pytest.raises(ConfigError):
            configure((800, 600), 6, 40, 8, [8, 0, 0], seed=1)

    def test_distribution_above_capacity(self):
        with pytest.raises(ConfigError):
            configure((800, 600), 2, 40, 8, [8, 10], seed=1)

    def test_placement_failure(self):
        with pytest.raises(PlacementError):
            configure((200, 200), 10, 40, 8, [0] * 10, seed=1)

    def test_placement_failure_is_config_error(self):
        with pytest.raises(ConfigError):
            configure((200, 200), 10, 40, 8, [0] * 10, seed=1)

    @pytest.mark.parametrize("coins", [[2.7, 0], ["a", 0], [True, 0], [None, 0]])
    def test_non_integer_distribution(self, coins):
        with pytest.raises(ConfigError):
            configure((800, 600), 2, 40, 8, coins, seed=1)

    def test_numpy_integer_distribution(self):
        sim = configure((800, 600), 2, 40, 8, np.array([5, 3]), seed=1)
        assert [d.coin_count for d in sim.disk_snapshot()] == [5, 3]
        assert all(type(d.coin_count) is int for d in sim.disk_snapshot())


class TestSetup:
    """Tests for the initial state."""

    def test_disks_placed_with_coins(self):
        sim = configure((800, 600), 6, 40, 8, [8, 0, 0, 0, 0, 0], seed=7)
        snap = sim.disk_snapshot()
        assert [d.coin_count for d in snap] == [8, 0, 0, 0, 0, 0]
        assert [d.index for d in snap] == list(range(6))
        for d in snap:
            assert d.radius == 40.0
            assert sim.arena.contains(d.x, d.y)
            assert -200.0 <= d.vx <= 200.0
            assert -200.0 <= d.vy <= 200.0

    def test_same_seed_same_run(self):
        a = configure((800, 600), 6, 40, 8, [8, 0, 0, 0, 0, 0], seed=11)
        b = configure((800, 600), 6, 40, 8, [8, 0, 0, 0, 0, 0], seed=11)
        for _ in range(300):
            assert a.step(1 / 60).collisions == b.step(1 / 60).collisions
        assert a.disk_snapshot() == b.disk_snapshot()
        assert a.observe_statistics() == b.observe_statistics()


class TestStep:
    """Tests for one simulation step."""

    def test_forced_collision(self):
        sim = two_disk_sim()
        force_overlap(sim)
        report = sim.step(0.0)

        assert isinstance(report, StepReport)
        assert report.collided
        assert report.collisions == [(0, 1)]
        assert len(report.exchanges) == 1
        assert report.coins_lost == 0
        assert sim.collision_count() == 1
        assert sim.total_coins() == 6

        d0, d1 = sim.disk_snapshot()
        assert np.hypot(d1.x - d0.x, d1.y - d0.y) == pytest.approx(40.0)

    def test_no_collision_is_empty_report(self):
        sim = two_disk_sim()
        report = sim.step(1 / 60)
        assert report.collisions == []
        assert not report.collided
        assert sim.collision_count() == 0

    def test_samples_on_collision(self):
        sim = two_disk_sim()
        force_overlap(sim)
        sim.step(0.0)
        stats = sim.observe_statistics()
        assert stats.observations == 1
        assert stats.collision_count == 1
        assert sum(stats.last_counts) == 2

    def test_manual_sampling_only(self):
        sim = two_disk_sim(sample_on_collision=False)
        force_overlap(sim)
        sim.step(0.0)
        assert sim.observe_statistics().observations == 0
        sim.sample_statistics()
        assert sim.observe_statistics().observations == 1

    def test_elapsed_time(self):
        sim = two_disk_sim()
        sim.step(0.25)
        sim.step(0.25, speed_factor=2.0)
        sim.step(-1.0)
        assert sim.elapsed_time == pytest.approx(0.75)

    def test_conservation_over_long_run(self):
        sim = configure((800, 600), 6, 40, 8, [8, 0, 0, 0, 0, 0], seed=5)
        total_collisions = 0
        for _ in range(3000):
            report = sim.step(1 / 60)
            total_collisions += len(report.collisions)
            assert sim.total_coins() == 8
        assert sim.collision_count() == total_collisions
        assert all(0 <= d.coin_count <= 8 for d in sim.disk_snapshot())

        stats = sim.observe_statistics()
        assert stats.observations == sim.collision_count()
        assert sum(stats.cumulative) == 6 * stats.observations

    def test_collision_counter_monotonic(self):
        sim = configure((800, 600), 6, 40, 8, [8, 0, 0, 0, 0, 0], seed=9)
        last = 0
        for _ in range(600):
            sim.step(1 / 60)
            assert sim.collision_count() >= last
            last = sim.collision_count()


class TestInvariantReporting:
    """Non-conserving exchanges are reported, never hidden."""

    def test_strict_raises(self):
        sim = two_disk_sim(policy=DropOnePolicy())
        force_overlap(sim)
        with pytest.raises(InvariantViolation):
            sim.step(0.0)

    def test_lenient_counts_lost_coins(self, caplog):
        sim = two_disk_sim(policy=DropOnePolicy(), strict_invariants=False)
        force_overlap(sim)
        with caplog.at_level(logging.WARNING, logger="coinsim"):
            report = sim.step(0.0)

        assert report.coins_lost == 1
        assert sim.coins_lost == 1
        assert sim.total_coins() == 5
        assert sim.initial_total == 6
        assert any("changed the coin total" in r.message for r in caplog.records)

    def test_legacy_policy_loses_coins_leniently(self):
        sim = configure(
            (800, 600), 10, 30, 8, [8] * 10,
            exchange_policy="independent_flip",
            seed=3,
            strict_invariants=False,
        )
        sim.run(duration=60.0, dt=1 / 60)
        assert sim.total_coins() == 80 - sim.coins_lost
        assert all(0 <= d.coin_count <= 8 for d in sim.disk_snapshot())


class TestRun:
    """Tests for the fixed-dt driver."""

    def test_summary(self):
        sim = configure((800, 600), 6, 40, 8, [8, 0, 0, 0, 0, 0], seed=2)
        summary = sim.run(duration=5.0, dt=0.01)
        assert summary["n_steps"] == 500
        assert summary["collision_count"] == sim.collision_count()
        assert summary["elapsed_time"] == pytest.approx(5.0)
        assert summary["total_coins"] == 8
        assert summary["coins_lost"] == 0

    def test_sample_interval(self):
        sim = two_disk_sim(sample_on_collision=False, normalization="per_observation")
        summary = sim.run(duration=1.0, dt=0.01, sample_interval=0.1)
        assert summary["observations"] == 10
        assert sim.observe_statistics().observations == 10

    @pytest.mark.parametrize("duration,dt", [(0.0, 0.01), (1.0, 0.0), (-1.0, 0.01)])
    def test_invalid_arguments(self, duration, dt):
        sim = two_disk_sim()
        with pytest.raises(ValueError):
            sim.run(duration=duration, dt=dt)

    def test_invalid_sample_interval(self):
        sim = two_disk_sim()
        with pytest.raises(ValueError):
            sim.run(duration=1.0, dt=0.01, sample_interval=0.0)

    @pytest.mark.parametrize("normalization", ["fleet_fraction", "per_collision"])
    def test_sample_interval_needs_per_observation(self, normalization):
        sim = two_disk_sim(sample_on_collision=False, normalization=normalization)
        with pytest.raises(ConfigError):
            sim.run(duration=1.0, dt=0.01, sample_interval=0.1)
        assert sim.observe_statistics().observations == 0

    @pytest.mark.parametrize("sample_on_collision", [False, True])
    def test_tick_sampled_fractions_bounded(self, sample_on_collision):
        sim = configure(
            (800, 600), 6, 40, 8, [8, 0, 0, 0, 0, 0],
            seed=42,
            normalization="per_observation",
            sample_on_collision=sample_on_collision,
        )
        sim.run(duration=30.0, dt=1 / 60, sample_interval=0.1)
        stats = sim.observe_statistics()

        assert stats.observations >= 300
        for k in range(stats.n_buckets):
            fractions = stats.fractions(k)
            assert np.all(fractions >= 0.0) and np.all(fractions <= 1.0)
        assert stats.current_fractions().sum() == pytest.approx(1.0)


class TestReadOnlyViews:
    """Snapshots are copies, never live aliases."""

    def test_disk_snapshot_is_copy(self):
        sim = configure((800, 600), 6, 40, 8, [8, 0, 0, 0, 0, 0], seed=4)
        before = sim.disk_snapshot()
        sim.run(duration=2.0)
        after = sim.disk_snapshot()
        assert before != after
        with pytest.raises(dataclasses.FrozenInstanceError):
            before[0].x = 0.0

    def test_statistics_snapshot_is_copy(self):
        sim = two_disk_sim()
        force_overlap(sim)
        sim.step(0.0)
        snap = sim.observe_statistics()
        sim.sample_statistics()
        assert snap.observations == 1
        assert sim.observe_statistics().observations == 2


class TestArenaBounds:
    """Every disk ends each step inside [r, W - r] x [r, H - r]."""

    def place_against_left_wall(self, sim):
        sim.disks[0].x, sim.disks[0].y = 20.0, 100.0
        sim.disks[1].x, sim.disks[1].y = 30.0, 100.0

    def assert_inside(self, sim):
        for d in sim.disk_snapshot():
            assert sim.arena.contains(d.x, d.y), d

    def test_collision_against_wall(self):
        sim = two_disk_sim()
        self.place_against_left_wall(sim)
        report = sim.step(1 / 60)

        assert report.collisions == [(0, 1)]
        self.assert_inside(sim)
        assert sim.disk_snapshot()[0].x == 20.0

    def test_zero_dt_step_still_confines(self):
        sim = two_disk_sim()
        self.place_against_left_wall(sim)
        sim.step(0.0)
        self.assert_inside(sim)

    def test_crowded_run_stays_inside(self):
        sim = configure((600, 400), 10, 30, 8, [8] + [0] * 9, seed=5)
        for _ in range(2000):
            sim.step(1 / 60)
            self.assert_inside(sim)
        assert sim.total_coins() == 8
