#!/usr/bin/env python3
"""
Demo: Coin Exchange Between Bouncing Disks

The original experiment:
1. Six disks in an 800x600 box, one of them holding all 8 coins
2. Every collision splits the pair's coins uniformly at random
3. Track the running fraction of disks holding 0..8 coins
4. Compare the long-run occupancy with the theoretical equilibrium

This shows the coin distribution relaxing to the uniform-split equilibrium.
"""

import logging
from pathlib import Path

import matplotlib.pyplot as plt

from coinsim.core import ArenaConfig, Simulation, SimulationConfig
from coinsim.analysis import compare_with_equilibrium
from coinsim.logging_config import setup_logging
from coinsim.viz import plot_arena, plot_equilibrium_comparison, plot_running_fractions


def main():
    setup_logging(logging.INFO)

    print("=" * 60)
    print("  COIN EXCHANGE BETWEEN BOUNCING DISKS")
    print("=" * 60)

    arena = ArenaConfig(width=800, height=600, disk_radius=40, disk_count=6, max_coins=8)
    config = SimulationConfig(
        arena=arena,
        initial_coins=(8, 0, 0, 0, 0, 0),
        policy="uniform_split",
        seed=42,
    )

    print(f"\n1. Setup:")
    print(f"   Arena: {arena.width:g}x{arena.height:g}, {arena.disk_count} disks of radius {arena.disk_radius:g}")
    print(f"   Coins: {config.initial_coins}, max {arena.max_coins} per disk")
    print(f"   Policy: {config.policy}")

    sim = Simulation(config)

    print("\n2. Running...")
    duration = 600.0
    summary = sim.run(duration=duration, dt=1 / 120)
    print(f"   {summary['n_steps']} steps, {duration:g} simulated seconds")
    print(f"   Collisions: {summary['collision_count']}")
    print(f"   Coins in system: {summary['total_coins']} (lost {summary['coins_lost']})")

    stats = sim.observe_statistics()
    comparison = compare_with_equilibrium(stats, total_coins=sim.total_coins())

    print("\n3. Occupancy vs. equilibrium:")
    for k, (obs, exp) in enumerate(zip(comparison.observed, comparison.expected)):
        print(f"   {k} coins: observed {obs:.3f}   equilibrium {exp:.3f}")
    print(f"   Total variation distance: {comparison.total_variation:.4f}")

    print("\n4. Creating visualization...")
    output_dir = Path("output/demo_coin_exchange")
    output_dir.mkdir(parents=True, exist_ok=True)

    fig, _ = plot_running_fractions(stats)
    path = output_dir / "running_fractions.png"
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"   Saved: {path}")

    fig, _ = plot_arena(sim.disk_snapshot(), arena, title=f"After {sim.collision_count()} collisions")
    path = output_dir / "arena.png"
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"   Saved: {path}")

    fig = plot_equilibrium_comparison(comparison)
    path = output_dir / "equilibrium.png"
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"   Saved: {path}")

    print("\n" + "=" * 60)
    print("  SUMMARY")
    print("=" * 60)
    print(f"  • {sim.collision_count()} collisions, coins conserved: {sim.total_coins() == sim.initial_total}")
    print(f"  • Most disks end up holding {int(comparison.observed.argmax())} coins on average")
    print(f"  • Distance to equilibrium: {comparison.total_variation:.4f}")
    print("=" * 60)


if __name__ == "__main__":
    main()
