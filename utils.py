# utils.py
"""
utils.py - Common utility functions for Terraflow

Provides shared, stateless helper functions used across different modules.
"""
from __future__ import annotations

from typing import Optional, Sequence, Tuple, TypeVar, Union

import numpy as np
from scipy.special import expit

from simulation.config import SIGMOID_STEEPNESS

T = TypeVar("T")


def sigmoid(x: Union[float, np.ndarray], steepness: float = SIGMOID_STEEPNESS) -> Union[float, np.ndarray]:
    """Sigmoid gate centred on 1.0: 1 / (1 + e^-(k * (x - 1))).

    Works on scalars and arrays. Used to softly cap how much of a quantity
    (water, humidity) may move in one epoch.
    """
    gate = expit(steepness * (np.asarray(x, dtype=np.float64) - 1.0))
    if np.ndim(gate) == 0:
        return float(gate)
    return gate


# =============================================================================
# Random Selection
# =============================================================================

def pick_weighted(
    candidates: Sequence[Tuple[T, float]],
    rng: np.random.Generator,
    fallback: Optional[T] = None,
) -> Optional[T]:
    """Pick an entry from a list of (item, weight) pairs.

    Draws uniformly in [0, total) and walks the list subtracting weights until
    the remainder drops to zero or below. An empty list or a list whose
    weights sum to zero returns ``fallback`` instead of failing.

    Example: [("a", 0.7), ("b", 0.3)] -> "a" about 70% of the time
    """
    total = sum(weight for _, weight in candidates if weight > 0)
    if not candidates or total <= 0:
        return fallback

    remainder = rng.random() * total
    for item, weight in candidates:
        if weight <= 0:
            continue
        remainder -= weight
        if remainder <= 0:
            return item

    # Floating point can leave a sliver of remainder; the last positive entry wins
    for item, weight in reversed(candidates):
        if weight > 0:
            return item
    return fallback


def pick_uniform(options: Sequence[T], rng: np.random.Generator) -> T:
    """Pick one option with equal probability."""
    if not options:
        raise ValueError("pick_uniform needs at least one option")
    return options[int(rng.integers(len(options)))]
