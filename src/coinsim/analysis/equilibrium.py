"""
Theoretical equilibrium of the uniform-split exchange chain.

Under UniformSplitPolicy the joint coin configuration is a Markov chain
whose transitions are symmetric: a colliding pair resamples its split
uniformly among the feasible ones, and the reverse move has exactly the
same probability. The stationary distribution is therefore uniform over
every configuration (c_1, ..., c_N) with

    sum(c_i) = M,   0 <= c_i <= max_coins

so the marginal occupancy of a single disk is

    P(k) = C(M - k, N - 1) / C(M, N)

where C(m, n) counts compositions of m into n parts capped at max_coins.
By exchangeability P(k) is also the expected fleet fraction holding k.

The legacy flip policies lose coins, so they have no such fixed point;
comparing them against this curve is still a useful diagnostic.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

import numpy as np
from scipy import stats

from coinsim.core.exchange import feasible_splits

if TYPE_CHECKING:
    from coinsim.core.statistics import StatisticsSnapshot


def count_capped_compositions(total: int, parts: int, cap: int) -> list[int]:
    """
    Number of ways to write m = 0..total as an ordered sum of `parts`
    integers in 0..cap.

    Exact integer arithmetic (coefficients of (1 + x + ... + x^cap)^parts).

    Returns:
        counts[m] for m in 0..total
    """
    counts = [1] + [0] * total  # zero parts: only m = 0
    for _ in range(parts):
        new = [0] * (total + 1)
        # Sliding window sum over the last cap+1 entries
        window = 0
        for m in range(total + 1):
            window += counts[m]
            if m - cap - 1 >= 0:
                window -= counts[m - cap - 1]
            new[m] = window
        counts = new
    return counts


def equilibrium_distribution(disk_count: int, total_coins: int, max_coins: int) -> np.ndarray:
    """
    Stationary probability that one disk holds k coins, k = 0..max_coins.

    Args:
        disk_count: Number of disks N (>= 1)
        total_coins: Coins in the system M
        max_coins: Per-disk capacity

    Raises:
        ValueError: if no configuration exists (M > N * max_coins, N < 1)
    """
    if disk_count < 1:
        raise ValueError("disk_count must be >= 1")
    if total_coins < 0 or total_coins > disk_count * max_coins:
        raise ValueError(
            f"{total_coins} coins cannot be held by {disk_count} disks "
            f"of capacity {max_coins}"
        )

    all_disks = count_capped_compositions(total_coins, disk_count, max_coins)[total_coins]
    others = count_capped_compositions(total_coins, disk_count - 1, max_coins)

    probs = np.zeros(max_coins + 1, dtype=np.float64)
    for k in range(min(total_coins, max_coins) + 1):
        probs[k] = others[total_coins - k] / all_disks
    return probs


@dataclass
class EquilibriumComparison:
    """Observed occupancy versus the uniform-split equilibrium."""

    observed: np.ndarray   # Cumulative occupancy, normalized over buckets
    expected: np.ndarray   # equilibrium_distribution()
    total_variation: float # 0.5 * sum |observed - expected|
    max_error: float       # max |observed - expected|


def compare_with_equilibrium(
    snapshot: "StatisticsSnapshot",
    total_coins: int,
) -> EquilibriumComparison:
    """
    Compare a run's cumulative occupancy with the theoretical marginal.

    Args:
        snapshot: Statistics of a run (Simulation.observe_statistics())
        total_coins: Coins in the system during the run
    """
    expected = equilibrium_distribution(snapshot.disk_count, total_coins, snapshot.max_coins)
    observed = snapshot.occupancy()
    diff = np.abs(observed - expected)
    return EquilibriumComparison(
        observed=observed,
        expected=expected,
        total_variation=float(0.5 * diff.sum()),
        max_error=float(diff.max()) if diff.size else 0.0,
    )


@dataclass
class SplitTestResult:
    """Chi-square test of exchange outcomes against the uniform split."""

    splits: np.ndarray     # Feasible values of c1'
    observed: np.ndarray   # How often each split occurred
    statistic: float
    p_value: float


def split_uniformity_test(
    samples: Sequence[int],
    c1: int,
    c2: int,
    max_coins: int,
) -> SplitTestResult:
    """
    Chi-square goodness of fit of observed c1' values to the uniform split.

    Args:
        samples: Resulting c1' of repeated exchanges from the same (c1, c2)
        c1, c2: Pair counts before each exchange
        max_coins: Per-disk capacity

    Raises:
        ValueError: if a sample is not a feasible split or there are none
    """
    splits = feasible_splits(c1 + c2, max_coins)
    samples = np.asarray(samples, dtype=np.int64)
    if samples.size == 0:
        raise ValueError("no samples")
    if not np.isin(samples, splits).all():
        raise ValueError(f"samples contain values outside feasible splits {splits.tolist()}")

    observed = np.array([(samples == k).sum() for k in splits], dtype=np.int64)
    if splits.size == 1:
        return SplitTestResult(splits=splits, observed=observed, statistic=0.0, p_value=1.0)

    statistic, p_value = stats.chisquare(observed)
    return SplitTestResult(
        splits=splits,
        observed=observed,
        statistic=float(statistic),
        p_value=float(p_value),
    )
