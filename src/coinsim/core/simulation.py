"""
Simulation: one run of the coin-exchange disk experiment.

Each step:
1. Integrate motion (walls reflect)
2. Detect overlapping pairs over the full pair set
3. Resolve each pair in (i, j) order: bounce, separate, exchange coins
4. Validate each exchange and, if configured, feed the statistics

All run state (disks, RNG, collision counter, statistics, simulated time)
lives on the Simulation instance; nothing is shared between runs.

The step size is an explicit argument. For reproducible runs use a fixed
dt (see run()) rather than a raw frame delta.
"""

from __future__ import annotations
import logging
import math
import numbers
from dataclasses import dataclass, field

import numpy as np

from coinsim.core.arena import ArenaConfig, DEFAULT_MAX_COINS
from coinsim.core.collisions import ExchangeOutcome, detect_collisions, resolve_collision
from coinsim.core.disks import Disk, DiskSet, DiskView
from coinsim.core.errors import ConfigError, InvariantViolation
from coinsim.core.exchange import (
    CoinExchangePolicy,
    DEFAULT_POLICY,
    check_exchange,
    create_policy,
)
from coinsim.core.placement import DEFAULT_CLEARANCE, DEFAULT_MAX_ATTEMPTS, place_disks
from coinsim.core.statistics import (
    DEFAULT_NORMALIZATION,
    NORMALIZATIONS,
    Normalization,
    StatisticsAggregator,
    StatisticsSnapshot,
)

logger = logging.getLogger(__name__)

# One disk starts with every coin, the others with none
DEFAULT_INITIAL_COINS = (DEFAULT_MAX_COINS, 0, 0, 0, 0, 0)
DEFAULT_MAX_INITIAL_SPEED = 200.0
DEFAULT_DT = 1.0 / 60.0

# Slack for comparing accumulated float time against sampling ticks
_TIME_EPS = 1e-9


@dataclass
class SimulationConfig:
    """Configuration for a simulation run."""

    arena: ArenaConfig = field(default_factory=ArenaConfig)
    initial_coins: tuple[int, ...] = DEFAULT_INITIAL_COINS
    policy: str | CoinExchangePolicy = DEFAULT_POLICY
    seed: int | None = None

    max_initial_speed: float = DEFAULT_MAX_INITIAL_SPEED  # |vx|, |vy| drawn from U(-v, v)
    normalization: Normalization = DEFAULT_NORMALIZATION

    # Feed the statistics after every resolved collision
    sample_on_collision: bool = True
    # Raise on a non-conserving exchange instead of logging and counting it
    strict_invariants: bool = True

    clearance: float = DEFAULT_CLEARANCE
    max_placement_attempts: int = DEFAULT_MAX_ATTEMPTS

    def validate(self) -> None:
        """Raise ConfigError if the configuration cannot start a run."""
        arena = self.arena
        coins = tuple(self.initial_coins)
        if len(coins) != arena.disk_count:
            raise ConfigError(
                f"initial_coins has {len(coins)} entries for {arena.disk_count} disks"
            )
        for index, count in enumerate(coins):
            if isinstance(count, bool) or not isinstance(count, numbers.Integral):
                raise ConfigError(f"disk {index} starts with {count!r} coins, expected an integer")
            if count < 0 or count > arena.max_coins:
                raise ConfigError(
                    f"disk {index} starts with {count} coins, "
                    f"allowed range is 0..{arena.max_coins}"
                )
        if self.normalization not in NORMALIZATIONS:
            raise ConfigError(
                f"Unknown normalization: {self.normalization!r} "
                f"(expected one of {NORMALIZATIONS})"
            )
        if not math.isfinite(self.max_initial_speed) or self.max_initial_speed < 0:
            raise ConfigError(f"max_initial_speed must be >= 0, got {self.max_initial_speed}")
        if self.clearance < 1.0:
            raise ConfigError(f"clearance must be >= 1, got {self.clearance}")
        if self.max_placement_attempts < 1:
            raise ConfigError("max_placement_attempts must be >= 1")
        self.resolve_policy()

    def resolve_policy(self) -> CoinExchangePolicy:
        """Turn the configured policy (name or instance) into a policy object."""
        if isinstance(self.policy, str):
            return create_policy(self.policy)
        if not callable(getattr(self.policy, "exchange", None)):
            raise ConfigError(f"policy {self.policy!r} has no exchange() method")
        return self.policy


@dataclass
class StepReport:
    """What happened during one step."""

    collisions: list[tuple[int, int]] = field(default_factory=list)
    exchanges: list[ExchangeOutcome] = field(default_factory=list)
    coins_lost: int = 0

    @property
    def collided(self) -> bool:
        return bool(self.collisions)


class Simulation:
    """
    Disks bouncing in a box and trading coins on every collision.

    Usage:
        sim = Simulation(SimulationConfig(seed=1))
        for _ in range(600):
            sim.step(1 / 60)
        stats = sim.observe_statistics()
    """

    def __init__(self, config: SimulationConfig):
        config.validate()
        self.config = config
        self.arena = config.arena
        self.policy = config.resolve_policy()
        self.rng = np.random.default_rng(config.seed)

        positions = place_disks(
            self.arena,
            self.rng,
            max_attempts=config.max_placement_attempts,
            clearance=config.clearance,
        )
        v = config.max_initial_speed
        disks = []
        for (x, y), coins in zip(positions, config.initial_coins):
            vx, vy = self.rng.uniform(-v, v, size=2) if v > 0 else (0.0, 0.0)
            disks.append(Disk(x, y, float(vx), float(vy), self.arena.disk_radius, int(coins)))
        self.disks = DiskSet(disks, self.arena)

        self.statistics = StatisticsAggregator(
            self.arena.disk_count,
            self.arena.max_coins,
            normalization=config.normalization,
        )

        self._collision_count: int = 0
        self.elapsed_time: float = 0.0
        self.coins_lost: int = 0
        self.initial_total: int = self.disks.total_coins()

        logger.info(
            "configured %d disks (r=%g) in %gx%g arena, policy=%s, seed=%s, %d coins",
            self.arena.disk_count,
            self.arena.disk_radius,
            self.arena.width,
            self.arena.height,
            getattr(self.policy, "name", type(self.policy).__name__),
            config.seed,
            self.initial_total,
        )

    # -------------------------------------------------------------------------
    # Stepping

    def step(self, dt: float, speed_factor: float = 1.0) -> StepReport:
        """
        Advance motion by dt and resolve every collision once.

        Args:
            dt: Simulated seconds; dt <= 0 moves nothing
            speed_factor: External speed multiplier

        Returns:
            StepReport with the resolved (i, j) pairs in order
        """
        self.disks.advance(dt, speed_factor)
        if dt > 0 and speed_factor > 0:
            self.elapsed_time += dt * speed_factor

        report = StepReport()
        max_coins = self.arena.max_coins
        for event in detect_collisions(self.disks):
            outcome = resolve_collision(
                self.disks[event.i],
                self.disks[event.j],
                self.policy,
                self.rng,
                max_coins,
            )
            if outcome is None:
                continue

            self._collision_count += 1
            report.collisions.append(event.pair)
            report.exchanges.append(outcome)
            report.coins_lost += self._check_exchange(event.pair, outcome)

            if self.config.sample_on_collision:
                self.sample_statistics()

        # Separation can push a disk through a wall
        self.disks.confine()
        return report

    def _check_exchange(self, pair: tuple[int, int], outcome: ExchangeOutcome) -> int:
        """Validate an exchange; returns the coins it lost (lenient mode only)."""
        try:
            check_exchange(outcome.before, outcome.after, self.arena.max_coins)
        except InvariantViolation as exc:
            if self.config.strict_invariants:
                raise
            lost = exc.coins_lost
            self.coins_lost += lost
            logger.warning("disks %d and %d: %s", pair[0], pair[1], exc)
            return lost
        return 0

    def sample_statistics(self) -> np.ndarray:
        """Record one statistics tick at the current collision count."""
        return self.statistics.observe(self.disks.coin_counts(), self._collision_count)

    def run(
        self,
        duration: float,
        dt: float = DEFAULT_DT,
        speed_factor: float = 1.0,
        sample_interval: float | None = None,
    ) -> dict:
        """
        Run with a fixed dt for `duration` simulated seconds.

        Args:
            duration: Simulated time to cover (before speed_factor)
            dt: Fixed step size
            speed_factor: Speed multiplier passed to every step
            sample_interval: If set, sample statistics every this many
                simulated seconds (in addition to sample_on_collision)

        Returns:
            Summary dictionary

        Raises:
            ValueError: on a non-positive duration, dt or sample_interval
            ConfigError: if sample_interval is used with a normalization
                other than per_observation (its fractions would exceed 1)
        """
        if not duration > 0 or not dt > 0:
            raise ValueError(f"duration and dt must be positive, got {duration}, {dt}")
        if sample_interval is not None and not sample_interval > 0:
            raise ValueError(f"sample_interval must be positive, got {sample_interval}")
        if sample_interval is not None and self.statistics.normalization != "per_observation":
            raise ConfigError(
                f"sample_interval requires normalization='per_observation', "
                f"got {self.statistics.normalization!r}"
            )

        n_steps = max(1, int(math.ceil(duration / dt - 1e-9)))
        next_sample = self.elapsed_time + sample_interval if sample_interval else None
        collisions = 0
        lost = 0

        for _ in range(n_steps):
            report = self.step(dt, speed_factor)
            collisions += len(report.collisions)
            lost += report.coins_lost

            if next_sample is not None and self.elapsed_time >= next_sample - _TIME_EPS:
                self.sample_statistics()
                while next_sample <= self.elapsed_time + _TIME_EPS:
                    next_sample += sample_interval

        summary = {
            "n_steps": n_steps,
            "collisions": collisions,
            "collision_count": self._collision_count,
            "elapsed_time": self.elapsed_time,
            "observations": self.statistics.observations,
            "total_coins": self.total_coins(),
            "coins_lost": lost,
        }
        logger.info(
            "ran %d steps: %d collisions, %d observations, %d coins lost",
            n_steps,
            collisions,
            self.statistics.observations,
            lost,
        )
        return summary

    # -------------------------------------------------------------------------
    # Read-only views

    def observe_statistics(self) -> StatisticsSnapshot:
        """Snapshot of the cumulative per-bucket series."""
        return self.statistics.snapshot()

    def disk_snapshot(self) -> tuple[DiskView, ...]:
        """Immutable copies of every disk, in index order."""
        return self.disks.snapshot()

    def collision_count(self) -> int:
        """Collisions resolved since the run was configured."""
        return self._collision_count

    def total_coins(self) -> int:
        """Coins currently in the system."""
        return self.disks.total_coins()


def configure(
    arena: ArenaConfig | tuple[float, float],
    disk_count: int,
    disk_radius: float,
    max_coins: int,
    initial_coin_distribution,
    exchange_policy: str | CoinExchangePolicy = DEFAULT_POLICY,
    seed: int | None = None,
    **options,
) -> Simulation:
    """
    Build and start a Simulation from flat parameters.

    Args:
        arena: (width, height) or an ArenaConfig whose bounds are reused
        disk_count, disk_radius, max_coins: Disk parameters
        initial_coin_distribution: Starting coin count per disk
        exchange_policy: Policy name or instance
        seed: RNG seed (None for a fresh random run)
        **options: Remaining SimulationConfig fields

    Raises:
        ConfigError: on invalid parameters
        PlacementError: if the disks cannot be placed
    """
    if isinstance(arena, ArenaConfig):
        width, height = arena.width, arena.height
    else:
        width, height = arena
    arena_config = ArenaConfig(
        width=float(width),
        height=float(height),
        disk_radius=float(disk_radius),
        disk_count=int(disk_count),
        max_coins=int(max_coins),
    )
    config = SimulationConfig(
        arena=arena_config,
        initial_coins=tuple(initial_coin_distribution),
        policy=exchange_policy,
        seed=seed,
        **options,
    )
    return Simulation(config)
