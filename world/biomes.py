# world/biomes.py
"""
Terrain classification and morph rules for Terraflow.

Handles:
- Initial classification of a tile from altitude and temperature
- Three independent transition rule sets (humidity, water/soil, bedrock)
- The morph phase that picks each tile's next terrain type
"""
from __future__ import annotations

import logging
from typing import Dict, List, Tuple, TYPE_CHECKING

import numpy as np

from simulation.config import (
    CERTAIN,
    COOL_TEMPERATURE_RATIO,
    HIGH_HUMIDITY,
    HIGH_ODDS,
    LOW_HUMIDITY,
    LOW_ODDS,
    LOW_WATER,
    MED_ODDS,
)
from utils import pick_uniform, pick_weighted
from world.terrain import TileType

if TYPE_CHECKING:
    from game_state.state import WorldState
    from world.attributes import WorldAttributes

logger = logging.getLogger(__name__)

Candidates = List[Tuple[TileType, float]]

T = TileType


# =============================================================================
# Initial Classification
# =============================================================================

COOL_TILES: Candidates = [
    (T.GRASS, 0.4),
    (T.FOREST, 0.3),
    (T.WATER, 0.2),
    (T.DIRT, 0.2),
    (T.HILLS, 0.1),
    (T.ROCKY, 0.2),
    (T.WASTE, 0.1),
    (T.SWAMP, 0.1),
    (T.JUNGLE, 0.1),
]

HOT_TILES: Candidates = [
    (T.JUNGLE, 0.5),
    (T.DESERT, 0.3),
    (T.SWAMP, 0.3),
    (T.DIRT, 0.2),
    (T.ROCKY, 0.3),
    (T.WASTE, 0.1),
    (T.FOREST, 0.1),
    (T.GRASS, 0.1),
    (T.WATER, 0.1),
]


def classify_terrain(
    altitude: float,
    temperature: float,
    attributes: "WorldAttributes",
    rng: np.random.Generator,
) -> TileType:
    """Pick the starting terrain type of a tile. First matching tier wins."""
    if temperature <= 0.0:
        return T.ICE
    if altitude <= attributes.sea_level:
        return T.OCEAN
    if altitude >= attributes.mountain_height:
        return T.MOUNTAIN
    if altitude >= attributes.hill_height:
        return pick_uniform([T.HILLS, T.ROCKY], rng)

    if temperature <= COOL_TEMPERATURE_RATIO * attributes.base_temperature:
        table = COOL_TILES
    else:
        table = HOT_TILES
    return pick_weighted(table, rng, fallback=T.GRASS)


# =============================================================================
# Humidity Rules
# =============================================================================

# Types that only move once humidity passes HIGH_HUMIDITY; other land uses LOW_HUMIDITY
_HUMID_BIOMES = (T.SWAMP, T.JUNGLE)
_HUMIDITY_IMMUNE = (T.OCEAN, T.WATER, T.WASTE)
_DRIES_OUT = (T.SWAMP, T.JUNGLE, T.GRASS, T.HILLS, T.FOREST)

HUMID_TRANSITIONS: Dict[TileType, Candidates] = {
    T.GRASS: [(T.FOREST, MED_ODDS)],
    T.FOREST: [(T.JUNGLE, MED_ODDS)],
    T.DESERT: [(T.GRASS, LOW_ODDS), (T.DIRT, MED_ODDS)],
    T.ROCKY: [(T.HILLS, LOW_ODDS)],
    T.DIRT: [(T.GRASS, MED_ODDS)],
}

ARID_TRANSITIONS: Dict[TileType, Candidates] = {
    T.SWAMP: [(T.FOREST, MED_ODDS), (T.DESERT, LOW_ODDS)],
    T.JUNGLE: [(T.FOREST, MED_ODDS), (T.DESERT, LOW_ODDS)],
    T.GRASS: [(T.DIRT, MED_ODDS), (T.DESERT, MED_ODDS)],
    T.FOREST: [(T.GRASS, MED_ODDS)],
}


def humidity_exceeds(tile_type: TileType, humidity: float) -> bool:
    if tile_type in _HUMIDITY_IMMUNE:
        return False
    if tile_type in _HUMID_BIOMES:
        return humidity > HIGH_HUMIDITY
    return humidity > LOW_HUMIDITY


def humidity_below(tile_type: TileType, humidity: float) -> bool:
    return tile_type in _DRIES_OUT and humidity < LOW_HUMIDITY


def humidity_rules(tile_type: TileType, humidity: float) -> Candidates:
    """Transitions driven by air humidity."""
    candidates: Candidates = []
    if humidity_exceeds(tile_type, humidity):
        candidates.extend(HUMID_TRANSITIONS.get(tile_type, [(tile_type, CERTAIN)]))
    if humidity_below(tile_type, humidity):
        candidates.extend(ARID_TRANSITIONS.get(tile_type, [(tile_type, CERTAIN)]))
    return candidates or [(tile_type, CERTAIN)]


# =============================================================================
# Water / Soil Rules
# =============================================================================

_WATER_IMMUNE = (T.OCEAN, T.MOUNTAIN, T.ICE)
# Steps of the wetting chain Rocky -> Dirt -> Grass -> Forest -> Jungle -> Swamp -> Water
_FLOODABLE = (T.ROCKY, T.DIRT, T.GRASS, T.FOREST, T.JUNGLE, T.SWAMP)

FLOOD_TRANSITIONS: Dict[TileType, Candidates] = {
    T.ROCKY: [(T.DIRT, MED_ODDS)],
    T.DIRT: [(T.GRASS, LOW_ODDS)],
    T.GRASS: [(T.FOREST, MED_ODDS), (T.WATER, LOW_ODDS)],
    T.FOREST: [(T.JUNGLE, LOW_ODDS), (T.WATER, MED_ODDS)],
    T.JUNGLE: [(T.SWAMP, MED_ODDS)],
    T.SWAMP: [(T.WATER, MED_ODDS)],
}

DRYING_TRANSITIONS: Dict[TileType, Candidates] = {
    T.WATER: [(T.SWAMP, HIGH_ODDS), (T.FOREST, MED_ODDS)],
    T.SWAMP: [(T.DIRT, LOW_ODDS), (T.GRASS, MED_ODDS)],
    T.FOREST: [(T.GRASS, LOW_ODDS)],
}


def water_exceeds(tile_type: TileType, water: float, soil: float, sensitivity: float) -> bool:
    return tile_type in _FLOODABLE and water > soil + sensitivity


def water_below(tile_type: TileType, water: float, soil: float, sensitivity: float) -> bool:
    if tile_type in _WATER_IMMUNE:
        return False
    if tile_type == T.WATER:
        return water < soil
    if tile_type == T.SWAMP:
        return water < soil - sensitivity
    return water < LOW_WATER


def water_rules(tile_type: TileType, water: float, soil: float, sensitivity: float) -> Candidates:
    """Transitions driven by standing water relative to soil depth."""
    if water_exceeds(tile_type, water, soil, sensitivity):
        return list(FLOOD_TRANSITIONS[tile_type])
    if water_below(tile_type, water, soil, sensitivity):
        return list(DRYING_TRANSITIONS.get(tile_type, [(tile_type, CERTAIN)]))
    return [(tile_type, CERTAIN)]


# =============================================================================
# Bedrock Rules
# =============================================================================

_BEDROCK_IMMUNE = (T.OCEAN, T.WATER)
# Land that floods into ocean once its bedrock sinks to sea level
_DROWNABLE = (T.DIRT, T.GRASS, T.DESERT, T.FOREST, T.JUNGLE, T.SWAMP, T.WASTE)

UPLIFT_TRANSITIONS: Dict[TileType, Candidates] = {
    T.ROCKY: [(T.MOUNTAIN, HIGH_ODDS)],
    T.HILLS: [(T.MOUNTAIN, HIGH_ODDS)],
    T.ICE: [(T.MOUNTAIN, MED_ODDS)],
    T.DIRT: [(T.ROCKY, HIGH_ODDS)],
    T.DESERT: [(T.ROCKY, HIGH_ODDS)],
    T.GRASS: [(T.HILLS, HIGH_ODDS)],
}

SUBSIDE_TRANSITIONS: Dict[TileType, Candidates] = {
    T.MOUNTAIN: [(T.ROCKY, HIGH_ODDS)],
    T.HILLS: [(T.GRASS, HIGH_ODDS)],
    T.ROCKY: [(T.DIRT, HIGH_ODDS)],
}


def bedrock_exceeds(tile_type: TileType, bedrock: float, attributes: "WorldAttributes") -> bool:
    if tile_type in _BEDROCK_IMMUNE or tile_type == T.MOUNTAIN:
        return False
    ratio = bedrock / attributes.highest_elevation
    if tile_type in (T.ROCKY, T.HILLS, T.ICE):
        return ratio > attributes.mountain_point
    return ratio > attributes.hill_point


def bedrock_below(tile_type: TileType, bedrock: float, attributes: "WorldAttributes") -> bool:
    ratio = bedrock / attributes.highest_elevation
    if tile_type == T.MOUNTAIN:
        return ratio < attributes.mountain_point
    if tile_type in (T.ROCKY, T.HILLS):
        return ratio < attributes.hill_point
    return False


def bedrock_rules(tile_type: TileType, bedrock: float, attributes: "WorldAttributes") -> Candidates:
    """Transitions driven by bedrock height against the hill and mountain points."""
    if bedrock_exceeds(tile_type, bedrock, attributes):
        return list(UPLIFT_TRANSITIONS.get(tile_type, [(T.HILLS, MED_ODDS)]))
    if bedrock_below(tile_type, bedrock, attributes):
        return list(SUBSIDE_TRANSITIONS[tile_type])
    if tile_type in _DROWNABLE and bedrock <= attributes.sea_level:
        return [(T.OCEAN, MED_ODDS)]
    return [(tile_type, CERTAIN)]


def transition_candidates(
    tile_type: TileType,
    humidity: float,
    water: float,
    soil: float,
    bedrock: float,
    attributes: "WorldAttributes",
) -> Candidates:
    """All three rule sets concatenated, in evaluation order."""
    candidates = humidity_rules(tile_type, humidity)
    candidates.extend(water_rules(tile_type, water, soil, attributes.terrain_change_sensitivity))
    candidates.extend(bedrock_rules(tile_type, bedrock, attributes))
    return candidates


# =============================================================================
# Morph Phase
# =============================================================================

def morph_terrain(state: "WorldState") -> int:
    """Pick a new terrain type for every tile and flag the ones that changed.

    Returns:
        Number of tiles whose type changed this epoch.
    """
    attributes = state.attributes
    tile_types = state.tile_type
    humidity = state.humidity.tolist()
    water = state.water.tolist()
    soil = state.soil.tolist()
    bedrock = state.bedrock.tolist()

    changed = 0
    for i in range(state.tile_count):
        current = T(int(tile_types[i]))
        candidates = transition_candidates(
            current, humidity[i], water[i], soil[i], bedrock[i], attributes
        )
        new_type = pick_weighted(candidates, state.rng, fallback=current)
        if new_type != current:
            tile_types[i] = int(new_type)
            state.changed[i] = True
            changed += 1

    logger.debug("Morph: %d tiles changed type", changed)
    return changed
