"""
Running statistics over the coin distribution.

For every bucket k in 0..max_coins the aggregator tracks:
- cumulative[k]: total (observation, disk) pairs where a disk held k coins
- series[k]: append-only samples (collision_count, cumulative, fraction)

The running fraction divides cumulative[k] by an explicit denominator:
- "per_collision":   cumulative / collisions               (disks per collision)
- "fleet_fraction":  cumulative / (disk_count * collisions) (fraction of fleet)
- "per_observation": cumulative / (disk_count * observations)

The first two follow the collision counter; when statistics are sampled
on a fixed time tick instead of once per collision, "per_observation" is
the one that stays a proper average in [0, 1]. Before the denominator
becomes positive the fraction is defined as 0.

observe() is NOT idempotent: feeding the same snapshot twice counts it twice.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Literal, get_args

import numpy as np

from coinsim.core.errors import ConfigError, InvariantViolation


Normalization = Literal["per_collision", "fleet_fraction", "per_observation"]
NORMALIZATIONS: tuple[str, ...] = get_args(Normalization)
DEFAULT_NORMALIZATION: Normalization = "fleet_fraction"


@dataclass(frozen=True)
class SamplePoint:
    """One point of a bucket's running-fraction series."""

    collision_count: int
    cumulative: int
    fraction: float


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Read-only copy of the aggregator state, for charting."""

    disk_count: int
    max_coins: int
    normalization: str
    observations: int
    collision_count: int
    cumulative: tuple[int, ...]
    last_counts: tuple[int, ...]
    series: tuple[tuple[SamplePoint, ...], ...]

    @property
    def n_buckets(self) -> int:
        return self.max_coins + 1

    def x_values(self, bucket: int) -> np.ndarray:
        """Collision counts of a bucket's samples."""
        return np.array([p.collision_count for p in self.series[bucket]], dtype=np.int64)

    def fractions(self, bucket: int) -> np.ndarray:
        """Running fractions of a bucket's samples."""
        return np.array([p.fraction for p in self.series[bucket]], dtype=np.float64)

    def current_fractions(self) -> np.ndarray:
        """Latest running fraction per bucket (0 for buckets with no samples)."""
        return np.array(
            [s[-1].fraction if s else 0.0 for s in self.series],
            dtype=np.float64,
        )

    def occupancy(self) -> np.ndarray:
        """Cumulative counts normalized to a probability distribution over buckets."""
        counts = np.asarray(self.cumulative, dtype=np.float64)
        total = counts.sum()
        if total <= 0:
            return np.zeros_like(counts)
        return counts / total


def bucket_counts(coin_counts, max_coins: int) -> np.ndarray:
    """
    Number of disks holding each coin count 0..max_coins.

    Raises:
        InvariantViolation: if a count lies outside 0..max_coins
    """
    counts = np.asarray(coin_counts, dtype=np.int64).ravel()
    if counts.size and (counts.min() < 0 or counts.max() > max_coins):
        raise InvariantViolation(
            f"coin counts {counts.tolist()} outside 0..{max_coins}"
        )
    return np.bincount(counts, minlength=max_coins + 1)


def normalize(
    cumulative: np.ndarray,
    disk_count: int,
    collisions: int,
    observations: int,
    normalization: str,
) -> np.ndarray:
    """Divide cumulative counts by the denominator `normalization` names."""
    if normalization == "per_collision":
        denom = collisions
    elif normalization == "fleet_fraction":
        denom = disk_count * collisions
    elif normalization == "per_observation":
        denom = disk_count * observations
    else:
        raise ConfigError(
            f"Unknown normalization: {normalization!r} (expected one of {NORMALIZATIONS})"
        )
    cumulative = np.asarray(cumulative, dtype=np.float64)
    if denom <= 0:
        return np.zeros_like(cumulative)
    return cumulative / denom


class StatisticsAggregator:
    """
    Cumulative per-bucket occupancy and its running-fraction time series.

    Owned by a single Simulation; callers decide the sampling cadence.
    """

    def __init__(
        self,
        disk_count: int,
        max_coins: int,
        normalization: Normalization = DEFAULT_NORMALIZATION,
    ):
        if normalization not in NORMALIZATIONS:
            raise ConfigError(
                f"Unknown normalization: {normalization!r} (expected one of {NORMALIZATIONS})"
            )
        self.disk_count = int(disk_count)
        self.max_coins = int(max_coins)
        self.normalization = normalization

        self.cumulative = np.zeros(self.max_coins + 1, dtype=np.int64)
        self.last_counts = np.zeros(self.max_coins + 1, dtype=np.int64)
        self.observations: int = 0
        self.last_collision_count: int = 0
        self._series: list[list[SamplePoint]] = [[] for _ in range(self.max_coins + 1)]

    @property
    def n_buckets(self) -> int:
        return self.max_coins + 1

    def observe(self, coin_counts, collision_count: int) -> np.ndarray:
        """
        Record one statistics tick.

        Args:
            coin_counts: Current coin count of every disk
            collision_count: Collision counter at this tick (the x coordinate)

        Returns:
            Per-bucket counts of this snapshot (sums to disk_count)
        """
        counts = bucket_counts(coin_counts, self.max_coins)
        if counts.sum() != self.disk_count:
            raise InvariantViolation(
                f"snapshot holds {counts.sum()} disks, expected {self.disk_count}"
            )

        self.cumulative += counts
        self.last_counts = counts
        self.observations += 1
        self.last_collision_count = int(collision_count)

        fractions = normalize(
            self.cumulative,
            self.disk_count,
            self.last_collision_count,
            self.observations,
            self.normalization,
        )
        for k in range(self.n_buckets):
            self._series[k].append(
                SamplePoint(
                    collision_count=self.last_collision_count,
                    cumulative=int(self.cumulative[k]),
                    fraction=float(fractions[k]),
                )
            )
        return counts

    def running_fractions(self, normalization: Normalization | None = None) -> np.ndarray:
        """Current running fraction per bucket under any normalization."""
        return normalize(
            self.cumulative,
            self.disk_count,
            self.last_collision_count,
            self.observations,
            normalization or self.normalization,
        )

    def snapshot(self) -> StatisticsSnapshot:
        """Immutable copy of the current statistics."""
        return StatisticsSnapshot(
            disk_count=self.disk_count,
            max_coins=self.max_coins,
            normalization=self.normalization,
            observations=self.observations,
            collision_count=self.last_collision_count,
            cumulative=tuple(int(c) for c in self.cumulative),
            last_counts=tuple(int(c) for c in self.last_counts),
            series=tuple(tuple(s) for s in self._series),
        )
