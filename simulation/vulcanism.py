# simulation/vulcanism.py
"""Slow volcanic uplift applied once per epoch.

Uses the same decay law as map generation: a tile d rings from a volcano
gains epoch_increment of bedrock with probability 1 - d/mountain_spread,
once per volcano that reaches it.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from world.generation import raise_probability

if TYPE_CHECKING:
    from game_state.state import WorldState

logger = logging.getLogger(__name__)


def apply_vulcanism(state: "WorldState") -> float:
    """Raise bedrock around every volcano.

    Returns:
        Total bedrock added.
    """
    tiles = state.volcano_tiles
    if tiles.size == 0:
        return 0.0

    attributes = state.attributes
    probability = raise_probability(state.volcano_rings, attributes.mountain_spread)
    hits = state.rng.random(tiles.size) < probability
    np.add.at(state.bedrock, tiles[hits], attributes.epoch_increment)

    uplift = float(np.count_nonzero(hits) * attributes.epoch_increment)
    state.ledger.uplifted_bedrock += uplift
    logger.debug("Vulcanism: %d raises, %.4f bedrock added", int(np.count_nonzero(hits)), uplift)
    return uplift
