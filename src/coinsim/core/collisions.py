"""
Collision detection and response for equal-mass disks.

Detection is a plain O(N²) sweep over all unordered pairs (i < j); at the
disk counts this experiment uses, no spatial index is needed.

Response for an overlapping pair:
1. Unit normal n along the line of centres (default (1, 0) if coincident)
2. Swap the normal velocity components (equal-mass elastic collision)
3. Push both disks apart by overlap/2 along the same n
4. Let the exchange policy redistribute the pair's coins
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Sequence, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from coinsim.core.disks import Disk
    from coinsim.core.exchange import CoinExchangePolicy

logger = logging.getLogger(__name__)

# Normal used when two centres coincide exactly
DEFAULT_NORMAL = (1.0, 0.0)


@dataclass(frozen=True)
class CollisionEvent:
    """An overlapping pair detected during one step."""

    i: int
    j: int

    @property
    def pair(self) -> tuple[int, int]:
        return self.i, self.j


@dataclass(frozen=True)
class ExchangeOutcome:
    """Coin counts of a resolved pair before and after the exchange."""

    before: tuple[int, int]
    after: tuple[int, int]

    @property
    def coins_lost(self) -> int:
        """Coins destroyed by the exchange (0 for a conserving policy)."""
        return sum(self.before) - sum(self.after)


def overlaps(d1: "Disk", d2: "Disk") -> bool:
    """True if the two disks' circular extents intersect."""
    return d1.distance_to(d2) < d1.radius + d2.radius


def detect_collisions(disks: Sequence["Disk"]) -> list[CollisionEvent]:
    """
    Find every overlapping pair.

    Args:
        disks: Disks indexed by identity

    Returns:
        CollisionEvents ordered by (i, j); empty when nothing touches
    """
    events = []
    n = len(disks)
    for i in range(n):
        for j in range(i + 1, n):
            if overlaps(disks[i], disks[j]):
                events.append(CollisionEvent(i, j))
    return events


def collision_normal(d1: "Disk", d2: "Disk") -> tuple[float, float, float]:
    """
    Unit normal pointing from d1 to d2, and the centre distance.

    Returns:
        (nx, ny, distance); the normal is DEFAULT_NORMAL at zero distance
    """
    dx = d2.x - d1.x
    dy = d2.y - d1.y
    dist = math.hypot(dx, dy)
    if dist == 0.0:
        return DEFAULT_NORMAL[0], DEFAULT_NORMAL[1], 0.0
    return dx / dist, dy / dist, dist


def bounce(d1: "Disk", d2: "Disk") -> None:
    """Elastic response only: swap normal velocities and separate the pair."""
    nx, ny, dist = collision_normal(d1, d2)

    v1n = d1.vx * nx + d1.vy * ny
    v2n = d2.vx * nx + d2.vy * ny

    # Swap normal components, tangential components untouched
    d1.vx += (v2n - v1n) * nx
    d1.vy += (v2n - v1n) * ny
    d2.vx += (v1n - v2n) * nx
    d2.vy += (v1n - v2n) * ny

    # Positional correction along the pre-correction normal
    overlap = (d1.radius + d2.radius) - dist
    if overlap > 0:
        shift = 0.5 * overlap
        d1.x -= nx * shift
        d1.y -= ny * shift
        d2.x += nx * shift
        d2.y += ny * shift


def resolve_collision(
    d1: "Disk",
    d2: "Disk",
    policy: "CoinExchangePolicy",
    rng: np.random.Generator,
    max_coins: int,
) -> ExchangeOutcome | None:
    """
    Resolve one pair if it still overlaps.

    Velocities and positions are updated first, then the policy is applied
    to the coin counts. The policy result is applied as-is; validating it
    is the caller's job (see check_exchange).

    Returns:
        ExchangeOutcome if a collision occurred, None otherwise
    """
    if not overlaps(d1, d2):
        return None

    bounce(d1, d2)

    before = (d1.coin_count, d2.coin_count)
    c1, c2 = policy.exchange(before[0], before[1], max_coins, rng)
    d1.coin_count, d2.coin_count = int(c1), int(c2)
    after = (d1.coin_count, d2.coin_count)

    logger.debug("collision exchange %s -> %s", before, after)
    return ExchangeOutcome(before=before, after=after)
