"""
Visualization utilities.

- Running-fraction chart per coin bucket
- Arena snapshot with coin balances
- Equilibrium comparison bars
"""

from coinsim.viz.charts import (
    BUCKET_COLORS,
    bucket_label,
    plot_running_fractions,
    plot_arena,
    plot_equilibrium_comparison,
    save_figure,
)

__all__ = [
    "BUCKET_COLORS",
    "bucket_label",
    "plot_running_fractions",
    "plot_arena",
    "plot_equilibrium_comparison",
    "save_figure",
]
