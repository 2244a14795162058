#!/usr/bin/env python3
"""
Demo: Exchange Policy Comparison

Runs the same arena and seed with each exchange policy:
- uniform_split: conserves coins, converges to the equilibrium
- independent_flip: clamps at max_coins, slowly loses coins
- zero_aware_flip: same clamping, with a nudge toward empty disks

Statistics are sampled on a fixed 0.1 s tick (not per collision) and
normalized per observation, so the three runs share one x axis scale.
"""

import logging
from pathlib import Path

import matplotlib.pyplot as plt

from coinsim.core import ArenaConfig, POLICIES, Simulation, SimulationConfig
from coinsim.logging_config import setup_logging
from coinsim.viz import plot_running_fractions


def main():
    setup_logging(logging.WARNING)

    print("=" * 60)
    print("  EXCHANGE POLICY COMPARISON")
    print("=" * 60)

    arena = ArenaConfig(width=800, height=600, disk_radius=30, disk_count=10, max_coins=8)
    initial_coins = (8, 8, 8, 8, 8, 0, 0, 0, 0, 0)
    duration = 300.0

    fig, axes = plt.subplots(1, len(POLICIES), figsize=(18, 5), sharey=True)

    for ax, name in zip(axes, POLICIES):
        config = SimulationConfig(
            arena=arena,
            initial_coins=initial_coins,
            policy=name,
            seed=7,
            normalization="per_observation",
            sample_on_collision=False,
            strict_invariants=False,
        )
        sim = Simulation(config)
        summary = sim.run(duration=duration, dt=1 / 120, sample_interval=0.1)

        print(f"\n{name}:")
        print(f"   Collisions:   {summary['collision_count']}")
        print(f"   Observations: {summary['observations']}")
        print(f"   Coins:        {sim.initial_total} -> {sim.total_coins()} (lost {sim.coins_lost})")

        plot_running_fractions(sim.observe_statistics(), title=name, ax=ax)

    fig.suptitle(f"Exchange policies, {arena.disk_count} disks, {duration:g} s", fontsize=14)
    fig.tight_layout()

    output_dir = Path("output/demo_policy_comparison")
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / "policies.png"
    fig.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close()
    print(f"\nSaved: {output_path}")


if __name__ == "__main__":
    main()
