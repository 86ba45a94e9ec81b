#!/usr/bin/env python3
"""Time geometry generation over a sweep of strip counts and resolutions.

Each cell of the cols x rows grid is generated a few times and the best
wall time reported, together with the triangle count it produced.

Usage:
    python benchmarks/benchmark_generation.py
    python benchmarks/benchmark_generation.py --algorithm ripple --repeats 5
"""

import argparse
import sys
import time
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from design_config import Algorithm, DesignConfig
from kirigami_engine import generate_kirigami_geometry

COLS_SWEEP = [11, 31, 61, 121]
ROWS_SWEEP = [4, 12, 24, 48]


def time_generation(config: DesignConfig, repeats: int):
    """Best wall time in ms and the triangle count of the last pass."""
    best = float("inf")
    triangles = 0
    for _ in range(repeats):
        started = time.perf_counter()
        output = generate_kirigami_geometry(config)
        best = min(best, time.perf_counter() - started)
        triangles = output.stats.triangle_count
    return best * 1000.0, triangles


def main():
    parser = argparse.ArgumentParser(description="Benchmark kirigami generation.")
    parser.add_argument("--algorithm", default="sphere",
                        choices=[a.value for a in Algorithm])
    parser.add_argument("--repeats", type=int, default=3)
    parser.add_argument("--fold", type=float, default=1.0)
    args = parser.parse_args()

    base = DesignConfig(algorithm=Algorithm(args.algorithm), fold_progress=args.fold)
    print(f"Benchmarking {args.algorithm}, best of {args.repeats}")
    print(f"{'cols':>6} {'rows':>6} {'triangles':>10} {'ms':>10}")
    for cols in COLS_SWEEP:
        for rows in ROWS_SWEEP:
            elapsed_ms, triangles = time_generation(
                replace(base, cols=cols, rows=rows), args.repeats,
            )
            print(f"{cols:>6} {rows:>6} {triangles:>10} {elapsed_ms:>10.2f}")


if __name__ == "__main__":
    main()
