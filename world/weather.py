# world/weather.py
"""
Epoch bookkeeping for Terraflow.

Tracks how many epochs have completed and how many remain in the current
batch run. Only the epoch scheduler mutates it.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class EpochCounter:
    """
    Completed epochs and remaining epochs in a batch.

    This is a plain dataclass so the counter can be inspected or logged
    without touching the scheduler.
    """
    epochs: int = 0
    epochs_to_run: int = 0

    def complete_epoch(self) -> int:
        """Count one finished epoch. Returns the new total."""
        self.epochs += 1
        return self.epochs

    def consume(self) -> int:
        """Decrement the remaining count (never below zero). Returns what is left."""
        self.epochs_to_run = max(0, self.epochs_to_run - 1)
        return self.epochs_to_run

    @property
    def batch_active(self) -> bool:
        return self.epochs_to_run > 0
