# simulation/surface.py
"""Hex-grid surface water overflow for Terraflow.

Water flows between neighbouring tiles based on combined height
(bedrock + soil + water).

Key concepts:
- Neighbour analysis splits each tile's neighbours into strictly lower and
  equal-or-higher sets
- An overflowing tile sends its whole batch (water plus eroded bedrock) to
  its single lowest neighbour, ties broken uniformly at random
- Transfers go through the incoming_water / incoming_soil mailboxes and land
  in the next phase, so the order tiles are visited never matters
- Oceans never overflow and swallow whatever reaches them
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from simulation.config import HEIGHT_TIE_EPSILON
from simulation.erosion import eroded_bedrock
from utils import sigmoid
from world.terrain import TileType

if TYPE_CHECKING:
    from game_state.state import WorldState

logger = logging.getLogger(__name__)


def analyse_neighbour_heights(state: "WorldState") -> None:
    """Recompute lower/higher neighbour sets from combined height.

    Equal heights count as higher so level tiles never trade overflow.
    """
    heights = state.combined_height()
    ids = state.neighbour_ids
    valid = ids >= 0

    neighbour_heights = np.where(valid, heights[np.where(valid, ids, 0)], np.nan)
    own = heights[:, None]

    state.neighbour_heights[:] = neighbour_heights
    state.lower_mask[:] = valid & (neighbour_heights < own)
    state.higher_mask[:] = valid & (neighbour_heights >= own)


def pick_lowest_neighbours(state: "WorldState", tiles: np.ndarray) -> np.ndarray:
    """Lowest lower neighbour for each tile in ``tiles``.

    Heights within HEIGHT_TIE_EPSILON of the minimum tie; one of the tied
    neighbours is chosen uniformly at random. Every tile must have at least
    one lower neighbour.
    """
    if len(tiles) == 0:
        return np.zeros(0, dtype=np.int64)

    lower = state.lower_mask[tiles]
    heights = np.where(lower, state.neighbour_heights[tiles], np.inf)
    lowest = heights.min(axis=1, keepdims=True)
    tied = lower & (heights - lowest < HEIGHT_TIE_EPSILON)

    # Random keys only on tied slots: argmax picks uniformly among them
    keys = np.where(tied, state.rng.random(tied.shape), -1.0)
    slots = keys.argmax(axis=1)
    return state.neighbour_ids[tiles, slots]


def redistribute_overflow(state: "WorldState") -> float:
    """Move overflow water and eroded bedrock into mailboxes.

    For every non-ocean tile with at least one lower neighbour:
        water_overflow = max(water - soil, 0) * overflow_factor * sigmoid(water)
    capped at the water present. Tiles whose overflow is zero are skipped.
    Erosion uses the water this tile overflowed last epoch.

    Returns:
        Total water sent.
    """
    attributes = state.attributes
    water = state.water
    soil = state.soil

    has_lower = state.lower_mask.any(axis=1)
    can_overflow = has_lower & (state.tile_type != TileType.OCEAN)

    overflow = np.maximum(water - soil, 0.0) * attributes.overflow_factor * sigmoid(water)
    overflow = np.minimum(overflow, water)
    overflow[~can_overflow] = 0.0
    active = overflow > 0.0

    eroded = eroded_bedrock(soil, state.overflow_water, state.bedrock, attributes.erosion_factor)
    eroded[~active] = 0.0

    senders = np.flatnonzero(active)
    recipients = pick_lowest_neighbours(state, senders)
    np.add.at(state.incoming_water, recipients, overflow[senders])
    np.add.at(state.incoming_soil, recipients, eroded[senders])

    state.water[senders] -= overflow[senders]
    state.bedrock[senders] -= eroded[senders]

    # Feeds next epoch's erosion
    state.overflow_water[:] = overflow
    state.overflow_soil[:] = eroded

    eroded_total = float(eroded.sum())
    state.ledger.record_erosion(eroded_total)
    total = float(overflow.sum())
    logger.debug(
        "Overflow: %d tiles sent %.4f water and %.4f eroded bedrock",
        len(senders), total, eroded_total,
    )
    return total


def apply_overflow(state: "WorldState") -> float:
    """Credit overflow mailboxes, then zero them.

    Land tiles gain the water and the eroded material as soil. Oceans are
    the terminal sink: what reaches them is booked in the ledger only.

    Returns:
        Total water delivered to land.
    """
    incoming_water = state.incoming_water
    incoming_soil = state.incoming_soil
    ocean = state.tile_type == TileType.OCEAN
    land = ~ocean

    state.water[land] += incoming_water[land]
    state.soil[land] += incoming_soil[land]

    state.overflow_received_water[:] = incoming_water
    state.overflow_received_soil[:] = incoming_soil

    state.ledger.record_overflow_delivery(
        soil_on_land=float(incoming_soil[land].sum()),
        water_to_ocean=float(incoming_water[ocean].sum()),
        soil_to_ocean=float(incoming_soil[ocean].sum()),
    )
    delivered = float(incoming_water[land].sum())

    incoming_water[:] = 0.0
    incoming_soil[:] = 0.0
    return delivered
