"""
Analysis layer: theoretical predictions to compare runs against.

IMPORTANT: This is NOT seen by the engine. One-way derivation only.

- equilibrium_distribution: stationary single-disk occupancy under uniform split
- compare_with_equilibrium: observed cumulative occupancy vs. that prediction
- split_uniformity_test: chi-square check of exchange outcomes
"""

from coinsim.analysis.equilibrium import (
    EquilibriumComparison,
    SplitTestResult,
    compare_with_equilibrium,
    count_capped_compositions,
    equilibrium_distribution,
    split_uniformity_test,
)

__all__ = [
    "EquilibriumComparison",
    "SplitTestResult",
    "compare_with_equilibrium",
    "count_capped_compositions",
    "equilibrium_distribution",
    "split_uniformity_test",
]
