"""Timing, statistics and report formatting for the epoch benchmarks."""
from __future__ import annotations

import time
from statistics import median, pstdev
from typing import NamedTuple, Sequence


class Timer:
    """Context manager measuring wall time with perf_counter."""

    def __enter__(self):
        self.start = time.perf_counter()
        self.elapsed = 0.0
        return self

    def __exit__(self, *args):
        self.elapsed = time.perf_counter() - self.start


class TimeStats(NamedTuple):
    """Summary of a series of durations, in seconds."""
    mean: float
    median: float
    stdev: float
    low: float
    high: float

    @classmethod
    def of(cls, samples: Sequence[float]) -> "TimeStats":
        if not samples:
            return cls(0.0, 0.0, 0.0, 0.0, 0.0)
        return cls(
            sum(samples) / len(samples),
            median(samples),
            pstdev(samples),
            min(samples),
            max(samples),
        )


def tiles_per_second(tile_count: int, epoch_seconds: float) -> float:
    """Tile updates per second at the given epoch cost."""
    return tile_count / epoch_seconds if epoch_seconds > 0 else 0.0


# =============================================================================
# Report Formatting
# =============================================================================

def format_duration(seconds: float) -> str:
    """Milliseconds above 1ms, microseconds below."""
    if seconds >= 1e-3:
        return f"{seconds * 1e3:.2f}ms"
    return f"{seconds * 1e6:.1f}us"


def format_memory_mb(size: int) -> str:
    return f"{size / 2**20:.1f} MB"


def print_section_header(title: str, width: int = 80):
    print(f"\n{'=' * width}\n{title}\n{'=' * width}")


def print_metric(label: str, value: str):
    print(f"  {label:<22}{value}")


def print_phase_row(name: str, seconds: float, share: float):
    """One line of the per-phase breakdown: name, mean cost, share of the epoch."""
    print(f"  {name:<26}{format_duration(seconds):>10}  {share:5.1%}")


def print_progress(done: int, total: int, label: str = "Epochs"):
    """Single self-overwriting progress line."""
    fraction = done / total if total else 1.0
    print(f"    {label}: {done}/{total} ({fraction:.0%})", end="\r")
