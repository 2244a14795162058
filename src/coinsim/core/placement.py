"""
Initial placement of disks by rejection sampling.

A candidate centre is drawn uniformly inside the arena (kept one radius
away from every wall) and accepted only if it clears every disk already
placed by `clearance` times the sum of radii. With the default 10% margin
no two disks touch at frame zero.
"""

from __future__ import annotations
import logging
import math
from typing import Sequence, TYPE_CHECKING

import numpy as np

from coinsim.core.errors import PlacementError

if TYPE_CHECKING:
    from coinsim.core.arena import ArenaConfig

logger = logging.getLogger(__name__)

DEFAULT_CLEARANCE = 1.1
DEFAULT_MAX_ATTEMPTS = 1000


def find_valid_position(
    existing: Sequence[tuple[float, float]],
    radius: float,
    arena: "ArenaConfig",
    rng: np.random.Generator,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    clearance: float = DEFAULT_CLEARANCE,
    existing_radius: float | None = None,
) -> tuple[float, float] | None:
    """
    Draw a centre that fits in the arena and clears every existing disk.

    Args:
        existing: Centres of disks already placed
        radius: Radius of the disk being placed
        arena: Arena bounds
        rng: Random source
        max_attempts: Number of candidates to try before giving up
        clearance: Required distance as a multiple of the sum of radii
        existing_radius: Radius of the placed disks (defaults to `radius`)

    Returns:
        (x, y), or None if no candidate was accepted within the budget
    """
    r_other = radius if existing_radius is None else existing_radius
    min_dist = clearance * (radius + r_other)
    x_lo, x_hi = radius, arena.width - radius
    y_lo, y_hi = radius, arena.height - radius
    if x_hi < x_lo or y_hi < y_lo:
        return None

    for _ in range(max_attempts):
        x = float(rng.uniform(x_lo, x_hi))
        y = float(rng.uniform(y_lo, y_hi))
        if all(math.hypot(x - ex, y - ey) > min_dist for ex, ey in existing):
            return x, y
    return None


def place_disks(
    arena: "ArenaConfig",
    rng: np.random.Generator,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    clearance: float = DEFAULT_CLEARANCE,
) -> list[tuple[float, float]]:
    """
    Place arena.disk_count disks one after another.

    Raises:
        PlacementError: if some disk cannot be placed within max_attempts
    """
    positions: list[tuple[float, float]] = []
    for index in range(arena.disk_count):
        pos = find_valid_position(
            positions,
            arena.disk_radius,
            arena,
            rng,
            max_attempts=max_attempts,
            clearance=clearance,
        )
        if pos is None:
            raise PlacementError(
                f"could not place disk {index} of {arena.disk_count} "
                f"(radius {arena.disk_radius}, clearance {clearance}) in a "
                f"{arena.width}x{arena.height} arena after {max_attempts} attempts",
                placed=len(positions),
                requested=arena.disk_count,
            )
        logger.debug("placed disk %d at (%.1f, %.1f)", index, pos[0], pos[1])
        positions.append(pos)
    return positions
