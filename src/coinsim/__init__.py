"""
coinsim: Coin-Exchange Disk Simulator

Disks bounce around a 2D box and trade coins whenever they collide.
Tracking how many disks hold each coin count over many collisions turns
the billiard table into a Markov-chain experiment.

Core concepts:
- Disks move ballistically and reflect off the walls
- Collisions are elastic (equal masses: normal velocities swap)
- Each collision redistributes the pair's coins by a stochastic policy
- Coins are conserved and capped at max_coins per disk
- Running fractions per coin count converge to an equilibrium
"""

from coinsim.core import (
    ArenaConfig,
    ConfigError,
    InvariantViolation,
    PlacementError,
    Simulation,
    SimulationConfig,
    StepReport,
    configure,
)

__version__ = "0.1.0"

__all__ = [
    "ArenaConfig",
    "ConfigError",
    "InvariantViolation",
    "PlacementError",
    "Simulation",
    "SimulationConfig",
    "StepReport",
    "configure",
]
