"""
Static charts of a run.

- Running-fraction lines per coin bucket vs. collision count
- The arena with each disk and its coin balance
- Observed occupancy vs. the uniform-split equilibrium

All plots use matplotlib and return figures; nothing is shown or saved
unless the caller asks for it.
"""

from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.patches import Circle, Rectangle

if TYPE_CHECKING:
    from coinsim.analysis.equilibrium import EquilibriumComparison
    from coinsim.core.arena import ArenaConfig
    from coinsim.core.disks import DiskView
    from coinsim.core.statistics import StatisticsSnapshot


# Line colours of the original coin-count chart, one per bucket
BUCKET_COLORS = ["b", "r", "g", "c", "m", "y", "k", "#7f7f7f", "#ff7f0e"]

Y_LABELS = {
    "per_collision": "Running Average Disks per Collision",
    "fleet_fraction": "Running Average Fraction of Disks",
    "per_observation": "Running Average Fraction of Disks",
}


def bucket_label(k: int) -> str:
    """Legend label for a coin bucket."""
    return f"{k} coin" if k == 1 else f"{k} coins"


def bucket_color(k: int):
    """Colour for bucket k (falls back to tab20 beyond the original nine)."""
    if k < len(BUCKET_COLORS):
        return BUCKET_COLORS[k]
    return plt.get_cmap("tab20")(k % 20)


def plot_running_fractions(
    snapshot: "StatisticsSnapshot",
    title: str = "Running Average of Coin Counts",
    ax: Axes | None = None,
    figsize: tuple[float, float] = (9, 6),
    buckets: Sequence[int] | None = None,
) -> tuple[Figure, Axes]:
    """
    Plot each bucket's running fraction against the collision count.

    Args:
        snapshot: Simulation.observe_statistics()
        title: Plot title
        ax: Existing axes (creates new if None)
        buckets: Subset of buckets to draw (all by default)

    Returns:
        (fig, ax) tuple
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    if buckets is None:
        buckets = range(snapshot.n_buckets)

    for k in buckets:
        ax.plot(
            snapshot.x_values(k),
            snapshot.fractions(k),
            color=bucket_color(k),
            linewidth=1.5,
            label=bucket_label(k),
        )

    ax.set_title(title)
    ax.set_xlabel("Collision Count")
    ax.set_ylabel(Y_LABELS.get(snapshot.normalization, "Running Average"))
    ax.set_xlim(0.0, max(10.0, float(snapshot.collision_count)))
    if snapshot.normalization != "per_collision":
        ax.set_ylim(0.0, 1.0)
    ax.legend(loc="upper right", fontsize=8)
    ax.grid(True, alpha=0.3)

    return fig, ax


def plot_arena(
    disks: Sequence["DiskView"],
    arena: "ArenaConfig",
    title: str = "Bouncing Disks",
    ax: Axes | None = None,
    figsize: tuple[float, float] = (8, 6),
    show_velocity: bool = False,
) -> tuple[Figure, Axes]:
    """
    Draw the arena with every disk and its coin count.

    Args:
        disks: Simulation.disk_snapshot()
        arena: Arena bounds
        show_velocity: Draw a velocity arrow on each disk

    Returns:
        (fig, ax) tuple
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    ax.add_patch(Rectangle((0, 0), arena.width, arena.height, facecolor="black"))
    for disk in disks:
        ax.add_patch(Circle(disk.position, disk.radius, color=(0.0, 0.5, 1.0)))
        ax.text(
            disk.x, disk.y, str(disk.coin_count),
            color="white", ha="center", va="center", fontsize=12,
        )
        if show_velocity:
            ax.arrow(
                disk.x, disk.y, 0.2 * disk.vx, 0.2 * disk.vy,
                color="white", width=1.0, alpha=0.6,
            )

    ax.set_xlim(0, arena.width)
    # Screen coordinates: y grows downward
    ax.set_ylim(arena.height, 0)
    ax.set_aspect("equal")
    ax.set_title(title)
    ax.set_xticks([])
    ax.set_yticks([])

    return fig, ax


def plot_equilibrium_comparison(
    comparison: "EquilibriumComparison",
    title: str = "Occupancy vs. Uniform-Split Equilibrium",
    figsize: tuple[float, float] = (8, 5),
) -> Figure:
    """Bar chart of observed occupancy next to the theoretical marginal."""
    fig, ax = plt.subplots(figsize=figsize)

    k = np.arange(comparison.expected.size)
    width = 0.4
    ax.bar(k - width / 2, comparison.observed, width=width, label="Observed", color="tab:blue")
    ax.bar(k + width / 2, comparison.expected, width=width, label="Equilibrium", color="tab:orange")

    ax.set_xticks(k)
    ax.set_xlabel("Coins held")
    ax.set_ylabel("Fraction of disks")
    ax.set_title(f"{title}\nTV distance = {comparison.total_variation:.4f}")
    ax.legend()
    ax.grid(True, axis="y", alpha=0.3)

    fig.tight_layout()
    return fig


def save_figure(fig: Figure, path: str | Path, dpi: int = 150, **kwargs) -> None:
    """Save figure to file."""
    fig.savefig(path, dpi=dpi, bbox_inches="tight", **kwargs)
