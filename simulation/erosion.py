# simulation/erosion.py
"""Overflow erosion for Terraflow.

Erosion runs inside the overflow phase, only for tiles that actually
overflow this epoch. It is driven by the tile's soil, the water it
overflowed in the previous epoch and the world erosion_factor.

Key concepts:
- Erosion lowers bedrock, not soil
- The eroded material travels with the overflow water and lands as soil
  on the recipient (oceans swallow it)
"""
from __future__ import annotations

from typing import Union

import numpy as np

ArrayLike = Union[float, np.ndarray]


def erosion_fraction(soil: ArrayLike, previous_overflow: ArrayLike, erosion_factor: float) -> ArrayLike:
    """Share of bedrock stripped this epoch, in [0, 1].

    fraction = min(soil * previous_overflow * erosion_factor, 1)
    """
    return np.clip(np.asarray(soil) * np.asarray(previous_overflow) * erosion_factor, 0.0, 1.0)


def eroded_bedrock(
    soil: ArrayLike,
    previous_overflow: ArrayLike,
    bedrock: ArrayLike,
    erosion_factor: float,
) -> np.ndarray:
    """Bedrock removed from each tile. Never exceeds the bedrock present."""
    fraction = erosion_fraction(soil, previous_overflow, erosion_factor)
    return fraction * np.maximum(np.asarray(bedrock, dtype=np.float64), 0.0)
