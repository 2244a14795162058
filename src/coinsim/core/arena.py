"""
Arena: the immutable bounds and disk parameters of one run.

The arena stores ONLY setup constants:
- Box size (width, height)
- Disk radius and disk count (uniform across the run)
- Per-disk coin capacity (max_coins)

It is never mutated after a Simulation has been configured.
"""

from __future__ import annotations
import math
from dataclasses import dataclass

from coinsim.core.errors import ConfigError


# Defaults of the original bouncing-disk experiment
DEFAULT_WIDTH = 800.0
DEFAULT_HEIGHT = 600.0
DEFAULT_DISK_RADIUS = 40.0
DEFAULT_DISK_COUNT = 6
DEFAULT_MAX_COINS = 8


@dataclass(frozen=True)
class ArenaConfig:
    """Configuration for the 2D box the disks bounce around in."""

    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT
    disk_radius: float = DEFAULT_DISK_RADIUS
    disk_count: int = DEFAULT_DISK_COUNT
    max_coins: int = DEFAULT_MAX_COINS

    def __post_init__(self):
        for name in ("width", "height", "disk_radius"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigError(f"{name} must be a positive finite number, got {value!r}")
        if 2 * self.disk_radius > min(self.width, self.height):
            raise ConfigError(
                f"disk of radius {self.disk_radius} does not fit in a "
                f"{self.width}x{self.height} arena"
            )
        if self.disk_count < 0:
            raise ConfigError(f"disk_count must be >= 0, got {self.disk_count}")
        if self.max_coins < 0:
            raise ConfigError(f"max_coins must be >= 0, got {self.max_coins}")

    @property
    def n_buckets(self) -> int:
        """Number of coin-count buckets (0..max_coins)."""
        return self.max_coins + 1

    @property
    def x_range(self) -> tuple[float, float]:
        """Allowed range for a disk centre's x coordinate."""
        return self.disk_radius, self.width - self.disk_radius

    @property
    def y_range(self) -> tuple[float, float]:
        """Allowed range for a disk centre's y coordinate."""
        return self.disk_radius, self.height - self.disk_radius

    def contains(self, x: float, y: float, radius: float | None = None) -> bool:
        """True if a disk centred at (x, y) lies fully inside the arena."""
        r = self.disk_radius if radius is None else radius
        return r <= x <= self.width - r and r <= y <= self.height - r
