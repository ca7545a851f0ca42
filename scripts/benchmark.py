#!/usr/bin/env python3
"""
VaultMerkle Benchmark Script.

Performance benchmarks for tokenizing and hashing synthetic exports.
Requires Python 3.11+.

Usage:
    python scripts/benchmark.py --rows 5000
"""

import argparse
import asyncio
import random
import statistics
import sys
import time
from pathlib import Path
from typing import Any, Callable, TypeVar

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from parser.csv_tokenizer import parse_csv
from pipeline.compute import compute_tree
from utils.logger import configure_logging, get_logger


configure_logging(log_format="console")
logger = get_logger("benchmark")

T = TypeVar("T")

ALL_FIELDS = ["title", "username", "password", "last modified"]


def build_export(rows: int, seed: int = 0) -> str:
    """Generate a credential export with quoting and mixed timestamp styles."""
    rng = random.Random(seed)
    lines = ["Title,Username,Password,Last Modified,Notes"]
    for i in range(rows):
        stamp = f"2024-{rng.randint(1, 12):02d}-{rng.randint(1, 28):02d}T{rng.randint(0, 23):02d}:00:00Z"
        if i % 3 == 0:
            stamp = f"{rng.randint(1, 28)} Mar 2023 10:{i % 60:02d}:00 +0000"
        lines.append(
            f'"Site {i}, Inc.",user{i}@example.com,"p""{rng.getrandbits(48):x}",{stamp},note {i}'
        )
    return "\n".join(lines) + "\n"


def benchmark(name: str, func: Callable[[], T], iterations: int = 5) -> tuple[T, dict]:
    """
    Benchmark a function.

    Returns:
        Tuple of (result, stats)
    """
    times = []
    result = None

    for _ in range(iterations):
        start = time.perf_counter()
        result = func()
        elapsed = time.perf_counter() - start
        times.append(elapsed * 1000)  # Convert to ms

    return result, _stats(name, times)


async def benchmark_async(name: str, func: Callable, iterations: int = 5) -> tuple:
    """Async version of benchmark."""
    times = []
    result = None

    for _ in range(iterations):
        start = time.perf_counter()
        result = await func()
        elapsed = time.perf_counter() - start
        times.append(elapsed * 1000)

    return result, _stats(name, times)


def _stats(name: str, times: list[float]) -> dict[str, Any]:
    return {
        "name": name,
        "iterations": len(times),
        "min_ms": min(times),
        "max_ms": max(times),
        "mean_ms": statistics.mean(times),
        "median_ms": statistics.median(times),
        "stdev_ms": statistics.stdev(times) if len(times) > 1 else 0,
    }


def print_stats(stats: dict) -> None:
    """Print benchmark statistics."""
    print(f"\n  {stats['name']}:")
    print(f"    Mean:   {stats['mean_ms']:.2f} ms")
    print(f"    Median: {stats['median_ms']:.2f} ms")
    print(f"    Min:    {stats['min_ms']:.2f} ms")
    print(f"    Max:    {stats['max_ms']:.2f} ms")
    print(f"    Stdev:  {stats['stdev_ms']:.2f} ms")


async def run_benchmarks(rows: int, iterations: int) -> None:
    """Run all benchmarks."""
    print(f"\n=== VaultMerkle Benchmarks ({rows} rows) ===\n")

    text = build_export(rows)
    print(f"  Export size: {len(text.encode('utf-8')) / 1024:.1f} KiB")

    parsed, stats = benchmark("Tokenize CSV", lambda: parse_csv(text), iterations)
    print_stats(stats)

    async def hash_all():
        return await compute_tree(parsed.rows, ALL_FIELDS)

    tree, stats = await benchmark_async("Normalize, hash and build tree", hash_all, iterations)
    print_stats(stats)

    async def hash_title_only():
        return await compute_tree(parsed.rows, ["title"])

    _, stats = await benchmark_async("Title-only tree", hash_title_only, iterations)
    print_stats(stats)

    logger.info("benchmark_tree", depth=tree.depth, root_prefix=tree.root_prefix())
    print("\n=== Benchmark Complete ===\n")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run VaultMerkle performance benchmarks"
    )
    parser.add_argument("--rows", type=int, default=2000, help="Rows in the synthetic export")
    parser.add_argument("--iterations", type=int, default=5, help="Runs per benchmark")

    args = parser.parse_args()

    if args.rows < 1:
        print("Error: --rows must be at least 1")
        sys.exit(1)

    try:
        asyncio.run(run_benchmarks(args.rows, args.iterations))
    except KeyboardInterrupt:
        print("\nCancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
