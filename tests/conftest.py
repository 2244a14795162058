"""
Pytest configuration and shared fixtures.
"""

import matplotlib

matplotlib.use("Agg")

import pytest
import numpy as np


@pytest.fixture
def arena():
    """The original 800x600 arena with six disks of radius 40."""
    from coinsim.core import ArenaConfig
    return ArenaConfig(
        width=800.0,
        height=600.0,
        disk_radius=40.0,
        disk_count=6,
        max_coins=8,
    )


@pytest.fixture
def small_arena():
    """A 400x400 arena with two disks, for hand-placed collisions."""
    from coinsim.core import ArenaConfig
    return ArenaConfig(
        width=400.0,
        height=400.0,
        disk_radius=20.0,
        disk_count=2,
        max_coins=8,
    )


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)
