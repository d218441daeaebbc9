"""Micro-benchmark for solving and narrating nested resistor trees."""

from __future__ import annotations

import argparse
import cProfile
import pstats
import time

from spnet.circuits.circuit import Circuit
from spnet.dsl import build_tree


def ladder_dsl(depth: int) -> str:
    """Alternating series/parallel ladder, ``depth`` groups deep."""
    text = "R(100)"
    for level in range(depth):
        group = "series" if level % 2 == 0 else "parallel"
        text = f"{group}(R({level + 1}k), {text}, R(47))"
    return text


def run_benchmark(iterations: int, depth: int, profile: bool) -> None:
    root = build_tree(ladder_dsl(depth))

    def workload() -> None:
        start = time.perf_counter()
        for _ in range(iterations):
            solved = Circuit(source_voltage=12.0, root=root).solved()
            solved.report()
            solved.tutorial()
        elapsed = time.perf_counter() - start
        per_min = iterations / elapsed * 60.0
        print(f"Iterations: {iterations}")
        print(f"Depth: {depth}")
        print(f"Elapsed: {elapsed:.4f}s")
        print(f"Throughput: {per_min:.1f} solves/min")

    if profile:
        profiler = cProfile.Profile()
        profiler.enable()
        workload()
        profiler.disable()
        stats = pstats.Stats(profiler).strip_dirs().sort_stats("tottime")
        stats.print_stats(20)
    else:
        workload()


def main() -> None:
    parser = argparse.ArgumentParser(description="spnet solve/tutorial micro-benchmark")
    parser.add_argument("--iterations", type=int, default=200)
    parser.add_argument("--depth", type=int, default=40)
    parser.add_argument("--profile", action="store_true")
    args = parser.parse_args()
    run_benchmark(args.iterations, args.depth, args.profile)


if __name__ == "__main__":
    main()
