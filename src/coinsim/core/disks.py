"""
Disks and the disk set: the mutable state of a run.

A disk is a circular body with a float position and velocity, a radius
shared by every disk in the run, and an integer coin balance.

Motion is plain ballistic integration between collisions:
- x += vx * dt * speed_factor (same for y)
- Walls are perfectly reflective: clamp to the wall, negate the component
- x and y are handled independently (a corner hit bounces twice)
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Iterator, Sequence, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from coinsim.core.arena import ArenaConfig


@dataclass
class Disk:
    """One simulated disk. Mutated in place by motion and collisions."""

    x: float
    y: float
    vx: float
    vy: float
    radius: float
    coin_count: int = 0

    @property
    def position(self) -> tuple[float, float]:
        """Current centre (x, y)."""
        return self.x, self.y

    @property
    def velocity(self) -> tuple[float, float]:
        """Current velocity (vx, vy)."""
        return self.vx, self.vy

    @property
    def speed(self) -> float:
        """Current speed."""
        return math.hypot(self.vx, self.vy)

    def distance_to(self, other: Disk) -> float:
        """Distance between the two centres."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def view(self, index: int) -> DiskView:
        """Immutable copy of this disk's drawable state."""
        return DiskView(
            index=index,
            x=self.x,
            y=self.y,
            vx=self.vx,
            vy=self.vy,
            radius=self.radius,
            coin_count=self.coin_count,
        )


@dataclass(frozen=True)
class DiskView:
    """Read-only snapshot of a disk, safe to hand to a renderer."""

    index: int
    x: float
    y: float
    vx: float
    vy: float
    radius: float
    coin_count: int

    @property
    def position(self) -> tuple[float, float]:
        """Centre (x, y) at snapshot time."""
        return self.x, self.y


class DiskSet:
    """
    Fixed-size, ordered collection of disks inside an arena.

    A disk's index is its identity for the whole run: disks are created
    once by the placement step and never added or removed afterwards.
    """

    def __init__(self, disks: Sequence[Disk], arena: "ArenaConfig"):
        self.arena = arena
        self._disks: list[Disk] = list(disks)

    def __len__(self) -> int:
        return len(self._disks)

    def __iter__(self) -> Iterator[Disk]:
        return iter(self._disks)

    def __getitem__(self, index: int) -> Disk:
        return self._disks[index]

    def advance(self, dt: float, speed_factor: float = 1.0) -> None:
        """
        Move every disk by velocity * dt * speed_factor and bounce off walls.

        A zero or negative effective step is a no-op.

        Args:
            dt: Elapsed simulated time (seconds)
            speed_factor: External speed multiplier (slow-motion / fast-forward)
        """
        if not math.isfinite(dt) or not math.isfinite(speed_factor):
            raise ValueError(f"dt and speed_factor must be finite, got {dt!r}, {speed_factor!r}")
        step = dt * speed_factor
        if dt <= 0 or step <= 0:
            return

        for disk in self._disks:
            disk.x += disk.vx * step
            disk.y += disk.vy * step
        self.confine()

    def confine(self) -> None:
        """
        Clamp every disk into [r, W - r] x [r, H - r].

        A disk found past a wall is put back against it, and its velocity
        component toward that wall is negated. A component already pointing
        back into the arena is left alone.
        """
        width, height = self.arena.width, self.arena.height
        for disk in self._disks:
            r = disk.radius

            if disk.x - r < 0:
                disk.x = r
                disk.vx = abs(disk.vx)
            elif disk.x + r > width:
                disk.x = width - r
                disk.vx = -abs(disk.vx)

            if disk.y - r < 0:
                disk.y = r
                disk.vy = abs(disk.vy)
            elif disk.y + r > height:
                disk.y = height - r
                disk.vy = -abs(disk.vy)

    def snapshot(self) -> tuple[DiskView, ...]:
        """Immutable copies of all disks, in index order."""
        return tuple(disk.view(i) for i, disk in enumerate(self._disks))

    def coin_counts(self) -> np.ndarray:
        """Coin balance of every disk as an int array."""
        return np.array([disk.coin_count for disk in self._disks], dtype=np.int64)

    def total_coins(self) -> int:
        """Coins currently held by the whole set."""
        return int(sum(disk.coin_count for disk in self._disks))

    def positions(self) -> np.ndarray:
        """Centres as an [N, 2] array."""
        return np.array([disk.position for disk in self._disks], dtype=np.float64).reshape(-1, 2)

    def kinetic_energy(self) -> float:
        """Total kinetic energy in units of (unit mass) * speed²."""
        return 0.5 * sum(disk.vx**2 + disk.vy**2 for disk in self._disks)
