"""
Performance Benchmark
=====================

Measures tick and environment step throughput.

Usage:
    python -m tools.benchmark_speed [--steps S] [--quick]
"""

from __future__ import annotations

import argparse
import sys
import time

import numpy as np

from apple_catcher.catcher_core.config_loader import load_config
from apple_catcher.catcher_core.env_gym import AppleCatcherEnv
from apple_catcher.catcher_core.simulator import TickSimulator
from apple_catcher.catcher_core.world import World


def benchmark_simulator(
    num_steps: int = 10000,
    seed: int = 42
) -> dict:
    """
    Benchmark raw TickSimulator without session or Gym overhead.

    Lives are never allowed to run out so the world keeps its steady-state
    apple count for the whole run.

    Args:
        num_steps: Number of ticks.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    simulator = TickSimulator(config=config, seed=seed)
    frame_ms = config.loop.frame_ms

    world = World.initial(lives=num_steps + 1, now=0.0)
    now = 0.0
    start = time.perf_counter()

    for _ in range(num_steps):
        now += frame_ms
        world = simulator.advance(world, now)

    elapsed = time.perf_counter() - start

    return {
        "mode": "simulator",
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_env(
    num_steps: int = 10000,
    seed: int = 42
) -> dict:
    """
    Benchmark AppleCatcherEnv with random clicks.

    Args:
        num_steps: Number of steps.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    env = AppleCatcherEnv()
    rng = np.random.default_rng(seed)
    episodes = 1

    obs, _ = env.reset(seed=seed)
    start = time.perf_counter()

    for _ in range(num_steps):
        action = int(rng.integers(0, env.action_space.n))
        obs, _, terminated, truncated, _ = env.step(action)
        if terminated or truncated:
            obs, _ = env.reset()
            episodes += 1

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": "env",
        "num_steps": num_steps,
        "episodes": episodes,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def run_all_benchmarks(steps: int = 10000) -> list:
    """Run all benchmarks and print a summary."""
    results = []

    print("=" * 60)
    print("APPLE CATCHER PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    for name, bench in (("TickSimulator (raw)", benchmark_simulator), ("AppleCatcherEnv", benchmark_env)):
        print(f"Benchmarking {name}...")
        result = bench(num_steps=steps)
        results.append(result)
        print(f"  Steps/sec: {result['steps_per_second']:.1f}")
        print(f"  ms/step:   {result['ms_per_step']:.4f}")
        print()

    print(f"{'Mode':<20} {'Steps/s':>12} {'ms/step':>10}")
    print("-" * 44)
    for r in results:
        print(f"{r['mode']:<20} {r['steps_per_second']:>12.1f} {r['ms_per_step']:>10.4f}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Apple Catcher performance")
    parser.add_argument("--steps", type=int, default=10000, help="Steps per benchmark")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer steps)")

    args = parser.parse_args()

    steps = 1000 if args.quick else args.steps
    run_all_benchmarks(steps=steps)

    return 0


if __name__ == "__main__":
    sys.exit(main())
