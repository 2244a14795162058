"""
Core engine primitives.

This layer knows NOTHING about charts, windows or theoretical predictions.
It only knows:
- Disks with position, velocity, radius and a coin balance
- Reflective walls and elastic equal-mass collisions
- Coin exchange policies (pluggable, RNG passed explicitly)
- Non-overlapping initial placement
- Counting how many disks hold each coin count over time

Three exchange policies are available:
- UniformSplitPolicy: uniform over feasible splits (conserves coins, default)
- IndependentFlipPolicy: per-coin coin flips with clamping (legacy, lossy)
- ZeroAwareFlipPolicy: flip rule that first helps empty disks (legacy, lossy)
"""

from coinsim.core.errors import ConfigError, PlacementError, InvariantViolation
from coinsim.core.arena import ArenaConfig
from coinsim.core.disks import Disk, DiskSet, DiskView
from coinsim.core.collisions import (
    CollisionEvent,
    ExchangeOutcome,
    detect_collisions,
    collision_normal,
    resolve_collision,
)
from coinsim.core.exchange import (
    CoinExchangePolicy,
    UniformSplitPolicy,
    IndependentFlipPolicy,
    ZeroAwareFlipPolicy,
    POLICIES,
    create_policy,
    feasible_splits,
    check_exchange,
)
from coinsim.core.placement import find_valid_position, place_disks
from coinsim.core.statistics import (
    Normalization,
    SamplePoint,
    StatisticsAggregator,
    StatisticsSnapshot,
)
from coinsim.core.simulation import Simulation, SimulationConfig, StepReport, configure

__all__ = [
    "ConfigError",
    "PlacementError",
    "InvariantViolation",
    "ArenaConfig",
    "Disk",
    "DiskSet",
    "DiskView",
    "CollisionEvent",
    "ExchangeOutcome",
    "detect_collisions",
    "collision_normal",
    "resolve_collision",
    "CoinExchangePolicy",
    "UniformSplitPolicy",
    "IndependentFlipPolicy",
    "ZeroAwareFlipPolicy",
    "POLICIES",
    "create_policy",
    "feasible_splits",
    "check_exchange",
    "find_valid_position",
    "place_disks",
    "Normalization",
    "SamplePoint",
    "StatisticsAggregator",
    "StatisticsSnapshot",
    "Simulation",
    "SimulationConfig",
    "StepReport",
    "configure",
]
