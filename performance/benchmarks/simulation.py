#!/usr/bin/env python3
"""
Performance benchmarking script for Terraflow epochs.

Runs the epoch pipeline headless to measure pure simulation performance.
Profiles epoch times, per-phase cost, memory usage and hot code paths.
"""
from __future__ import annotations

import argparse
import cProfile
import io
import pstats
import time
import tracemalloc
from statistics import mean
from typing import Dict, List, Optional

from game_state import build_initial_state
from simulation.scheduler import PIPELINE
from world.attributes import load_world_attributes

from performance.benchmarks.utils import (
    TimeStats,
    Timer,
    format_duration,
    format_memory_mb,
    print_metric,
    print_phase_row,
    print_progress,
    print_section_header,
    tiles_per_second,
)


class PerformanceMetrics:
    """Tracks performance metrics during a benchmark run."""

    def __init__(self, tile_count: int):
        self.tile_count = tile_count
        self.build_time: float = 0.0
        self.epoch_times: List[float] = []
        self.phase_times: Dict[str, List[float]] = {name: [] for name, _ in PIPELINE}
        self.memory_snapshots: List[int] = []

    def record_phase_time(self, phase: str, duration: float):
        self.phase_times[phase].append(duration)

    def record_memory(self):
        current, _peak = tracemalloc.get_traced_memory()
        self.memory_snapshots.append(current)

    def print_report(self):
        """Print a performance report."""
        print_section_header("TERRAFLOW EPOCH BENCHMARK REPORT")
        print_metric("Tiles:", str(self.tile_count))
        print_metric("World build:", format_duration(self.build_time))

        if self.epoch_times:
            stats = TimeStats.of(self.epoch_times)
            print("\nEPOCH TIMING")
            print_metric("Epochs:", str(len(self.epoch_times)))
            print_metric("Mean:", format_duration(stats.mean))
            print_metric("Median:", format_duration(stats.median))
            print_metric("Std Dev:", format_duration(stats.stdev))
            print_metric("Min / Max:", f"{format_duration(stats.low)} / {format_duration(stats.high)}")
            print_metric("Epochs/sec:", f"{1.0 / stats.mean:.1f}" if stats.mean > 0 else "n/a")
            print_metric("Tiles/sec:", f"{tiles_per_second(self.tile_count, stats.mean):,.0f}")

            print("\nPHASE BREAKDOWN (average times)")
            for name, _ in PIPELINE:
                times = self.phase_times[name]
                if times:
                    share = mean(times) / stats.mean if stats.mean > 0 else 0.0
                    print_phase_row(name, mean(times), share)

        if self.memory_snapshots:
            print("\nMEMORY USAGE")
            print_metric("Mean:", format_memory_mb(int(mean(self.memory_snapshots))))
            print_metric("Peak:", format_memory_mb(max(self.memory_snapshots)))

        print("\n" + "=" * 80)


def run_epoch_profiled(state, metrics: PerformanceMetrics) -> None:
    """Run one epoch phase by phase with timing."""
    epoch_start = time.perf_counter()
    for name, fn in PIPELINE:
        with Timer() as t:
            fn(state)
            state.clamp_quantities(name)
        metrics.record_phase_time(name, t.elapsed)
    state.take_changed_tiles()
    state.epochs.complete_epoch()
    metrics.epoch_times.append(time.perf_counter() - epoch_start)


def run_benchmark(
    num_epochs: int = 100,
    radius: Optional[int] = None,
    seed: int = 0,
    profile_hotspots: bool = True,
) -> PerformanceMetrics:
    """
    Run a headless epoch benchmark.

    Args:
        num_epochs: Number of epochs to run
        radius: Map radius override (default: from defaults.json)
        seed: Random seed for a reproducible world
        profile_hotspots: If True, run cProfile to identify hot code paths
    """
    overrides = {"seed": seed}
    if radius is not None:
        overrides["map_radius"] = radius
    attributes = load_world_attributes(overrides=overrides)

    print(f"\nStarting benchmark: {num_epochs} epochs, map radius {attributes.map_radius}...")
    tracemalloc.start()

    with Timer() as build:
        state = build_initial_state(attributes)
    metrics = PerformanceMetrics(state.tile_count)
    metrics.build_time = build.elapsed

    profiler = cProfile.Profile() if profile_hotspots else None
    if profiler:
        profiler.enable()

    for i in range(num_epochs):
        run_epoch_profiled(state, metrics)
        if i % 10 == 0:
            metrics.record_memory()
            print_progress(i, num_epochs, "Epochs")
    print_progress(num_epochs, num_epochs, "Epochs")
    print()

    if profiler:
        profiler.disable()
    tracemalloc.stop()

    metrics.print_report()

    if profiler:
        print("\nHOT CODE PATHS (Top 20 functions by cumulative time)")
        print("=" * 80)
        s = io.StringIO()
        pstats.Stats(profiler, stream=s).sort_stats('cumulative').print_stats(20)
        for line in s.getvalue().split('\n')[:25]:
            if line.strip():
                print(line)

    return metrics


def compare_map_sizes(radii: List[int], num_epochs: int) -> None:
    """Run the benchmark at several map radii."""
    print_section_header("MAP SIZE COMPARISON BENCHMARK")
    results = []
    for radius in radii:
        metrics = run_benchmark(num_epochs=num_epochs, radius=radius, profile_hotspots=False)
        results.append((radius, metrics.tile_count, mean(metrics.epoch_times) if metrics.epoch_times else 0.0))

    print_section_header("SUMMARY")
    for radius, tiles, avg in results:
        print(f"  radius {radius:3d}  {tiles:6d} tiles  {format_duration(avg)} / epoch")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Headless epoch benchmark for Terraflow")
    parser.add_argument("--epochs", type=int, default=100, help="Epochs to run (default: 100)")
    parser.add_argument("--radius", type=int, default=None, help="Map radius override")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument("--no-profile", action="store_true", help="Skip cProfile hotspot report")
    parser.add_argument(
        "--compare", type=int, nargs="+", metavar="RADIUS",
        help="Compare epoch cost across map radii"
    )
    args = parser.parse_args()

    if args.compare:
        compare_map_sizes(args.compare, args.epochs)
    else:
        run_benchmark(
            num_epochs=args.epochs,
            radius=args.radius,
            seed=args.seed,
            profile_hotspots=not args.no_profile,
        )


if __name__ == "__main__":
    main()
