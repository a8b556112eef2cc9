# simulation/atmosphere.py
"""Precipitation, evaporation and humidity redistribution.

All four phases are vectorized over the tile arrays:
- precipitate: humidity rains onto land as standing water
- evaporate: standing water lifts into humidity (oceans never drain)
- redistribute_humidity: humid air escapes toward higher neighbours
- apply_humidity: pending humidity mailboxes are credited and cleared
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from utils import sigmoid
from world.terrain import TileType, lookup_table

if TYPE_CHECKING:
    from game_state.state import WorldState

logger = logging.getLogger(__name__)

# Per-type multipliers indexed by TileType value
PRECIPITATION_WEIGHTS = np.array(lookup_table("precipitation_weight"), dtype=np.float64)
EVAPORATION_FACTORS = np.array(lookup_table("evaporation_factor"), dtype=np.float64)


def precipitate(state: "WorldState") -> float:
    """Rain humidity down onto non-ocean tiles.

    precipitation = sigmoid(humidity) * humidity * tile weight * precipitation_factor

    Returns:
        Total water added to land tiles.
    """
    humidity = state.humidity
    weights = PRECIPITATION_WEIGHTS[state.tile_type]
    amount = sigmoid(humidity) * humidity * weights * state.attributes.precipitation_factor
    amount = np.maximum(amount, 0.0)

    state.precipitation[:] = amount
    # Oceans are already full
    land = state.tile_type != TileType.OCEAN
    state.water[land] += amount[land]

    total = float(amount[land].sum())
    state.ledger.precipitated += total
    logger.debug("Precipitation: %.4f water onto %d land tiles", total, int(land.sum()))
    return total


def evaporate(state: "WorldState") -> float:
    """Lift standing water into humidity.

    Warmer tiles evaporate more; oceans evaporate at double rate but their
    water level is an inexhaustible reservoir and never drops.

    Returns:
        Total humidity gained.
    """
    attributes = state.attributes
    normalized_temp = np.clip(state.temperature / attributes.base_temperature, 0.0, 1.0)
    factors = EVAPORATION_FACTORS[state.tile_type]
    amount = np.maximum(normalized_temp * state.water * attributes.evaporation_factor * factors, 0.0)

    land = state.tile_type != TileType.OCEAN
    # Land cannot lose more water than it holds
    amount[land] = np.minimum(amount[land], state.water[land])

    state.evaporation[:] = amount
    state.humidity += amount
    state.water[land] -= amount[land]

    total = float(amount.sum())
    state.ledger.evaporated += total
    logger.debug("Evaporation: %.4f water into humidity", total)
    return total


def redistribute_humidity(state: "WorldState") -> float:
    """Post escaping humidity to higher neighbours' mailboxes.

    A tile with at least one equal-or-higher neighbour sends
    humidity * sigmoid(humidity) * humidity_escape_factor, split evenly
    across those neighbours. Tiles with no higher neighbour keep theirs.

    Returns:
        Total humidity sent.
    """
    humidity = state.humidity
    higher_count = state.higher_mask.sum(axis=1)
    senders = higher_count > 0

    escape = humidity * sigmoid(humidity) * state.attributes.humidity_escape_factor
    escape = np.clip(escape, 0.0, humidity)
    escape[~senders] = 0.0

    share = np.divide(escape, higher_count, out=np.zeros_like(escape), where=senders)
    # Row-major mask order keeps each sender's targets contiguous
    targets = state.neighbour_ids[state.higher_mask]
    amounts = np.repeat(share, higher_count)
    np.add.at(state.pending_humidity, targets, amounts)

    state.humidity[:] = np.maximum(humidity - escape, 0.0)
    state.humidity_sent[:] = escape

    total = float(escape.sum())
    logger.debug("Humidity redistribution: %.4f sent from %d tiles", total, int(senders.sum()))
    return total


def apply_humidity(state: "WorldState") -> float:
    """Credit the pending humidity mailboxes, then zero them."""
    received = state.pending_humidity.copy()
    state.humidity += received
    state.humidity_received[:] = received
    state.pending_humidity[:] = 0.0
    return float(received.sum())
