"""Deterministic micro-benchmark of the linked and heap frontiers.

Generates random mazes from a fixed seed, solves each with both frontier
implementations and reports timing. Costs must agree between the two.

Usage:
    python scripts/benchmark_frontiers.py [--size 61] [--count 5] [--output FILE.json]
"""

from __future__ import annotations

import argparse
import json
import statistics
import sys
import time
from typing import Any, Dict, List
import numpy as np

from maze_solver.integration.io import parse_maze
from maze_solver.search.dijkstra import create_searcher
from maze_solver.search.frontier import FRONTIER_KINDS


def random_maze(size: int, wall_density: float, rng: np.random.Generator) -> str:
    """Square maze with a solid border, start bottom-left and end top-right."""
    walls = rng.random((size, size)) < wall_density
    walls[0, :] = walls[-1, :] = True
    walls[:, 0] = walls[:, -1] = True
    rows = [["#" if w else "." for w in row] for row in walls]
    rows[size - 2][1] = "S"
    rows[1][size - 2] = "E"
    return "\n".join("".join(row) for row in rows)


def run(size: int, count: int, wall_density: float, seed: int) -> Dict[str, Any]:
    """Run the benchmark and return structured results."""
    rng = np.random.default_rng(seed)
    results: List[Dict[str, Any]] = []

    for index in range(count):
        maze, start = parse_maze(random_maze(size, wall_density, rng))
        entry: Dict[str, Any] = {"maze": index}
        for kind in FRONTIER_KINDS:
            searcher = create_searcher(maze, start, frontier=kind)
            t0 = time.perf_counter()
            result = searcher.run()
            entry[kind] = {
                "cost": result.cost,
                "time": time.perf_counter() - t0,
                "nodes_expanded": result.nodes_expanded,
            }
        entry["agree"] = len({entry[kind]["cost"] for kind in FRONTIER_KINDS}) == 1
        results.append(entry)

    return {
        "size": size,
        "count": count,
        "wall_density": wall_density,
        "seed": seed,
        "all_agree": all(r["agree"] for r in results),
        "median_time": {
            kind: statistics.median(r[kind]["time"] for r in results) for kind in FRONTIER_KINDS
        },
        "results": results,
    }


def print_summary(summary: Dict[str, Any]) -> None:
    print("Frontier Benchmarks")
    print("=" * 40)
    for r in summary["results"]:
        cost = r["linked"]["cost"]
        print(f"maze {r['maze']:3d} cost={cost!s:>8} "
              f"linked={r['linked']['time']*1000:.1f}ms heap={r['heap']['time']*1000:.1f}ms "
              f"{'OK' if r['agree'] else 'MISMATCH'}")
    print("-" * 40)
    for kind, t in summary["median_time"].items():
        print(f"Median {kind:6s} time: {t*1000:.1f}ms")


def main():
    parser = argparse.ArgumentParser(description="Compare frontier implementations")
    parser.add_argument("--size", type=int, default=61, help="Maze side length (default: 61)")
    parser.add_argument("--count", type=int, default=5, help="Number of mazes (default: 5)")
    parser.add_argument("--wall-density", type=float, default=0.25,
                        help="Probability of an interior wall (default: 0.25)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--output", "-o", type=str, help="Output JSON file path")
    args = parser.parse_args()

    summary = run(args.size, args.count, args.wall_density, args.seed)
    print_summary(summary)

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(summary, f, indent=2)
        print(f"\nResults written to {args.output}")

    sys.exit(0 if summary["all_agree"] else 1)


if __name__ == "__main__":
    main()
