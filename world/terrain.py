# world/terrain.py
"""
Terrain types for Terraflow.

Each hex tile carries exactly one TileType. The type decides the starting
soil, water and humidity of a freshly built tile and scales precipitation
and evaporation during epochs. Types change over time through the morph
rules in world/biomes.py.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Tuple

from simulation.config import DEFAULT_EVAPORATION_FACTOR, OCEAN_EVAPORATION_FACTOR


# Stored as int8 in WorldState.tile_type, so values must stay small and stable
class TileType(IntEnum):
    OCEAN = 0
    WATER = 1
    MOUNTAIN = 2
    GRASS = 3
    HILLS = 4     # Visual variant of grass
    DESERT = 5
    DIRT = 6
    ROCKY = 7     # Visual variant of dirt
    FOREST = 8
    ICE = 9
    JUNGLE = 10
    SWAMP = 11
    WASTE = 12

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class TileProperties:
    """Static simulation properties of a terrain type."""
    name: str
    soil: float                  # Starting soil elevation
    water: float                 # Starting water elevation (ocean uses sea level instead)
    humidity: float              # Starting humidity
    precipitation_weight: float  # Multiplier on precipitation
    evaporation_factor: float    # Multiplier on evaporation


TILE_PROPERTIES: Dict[TileType, TileProperties] = {
    TileType.OCEAN: TileProperties(
        "ocean", soil=0.0, water=0.0, humidity=1.0,
        precipitation_weight=0.5, evaporation_factor=OCEAN_EVAPORATION_FACTOR,
    ),
    TileType.WATER: TileProperties(
        "water", soil=0.0, water=1.0, humidity=1.0,
        precipitation_weight=0.1, evaporation_factor=DEFAULT_EVAPORATION_FACTOR,
    ),
    TileType.MOUNTAIN: TileProperties(
        "mountain", soil=0.0, water=0.4, humidity=0.5,
        precipitation_weight=0.7, evaporation_factor=DEFAULT_EVAPORATION_FACTOR,
    ),
    TileType.GRASS: TileProperties(
        "grass", soil=0.5, water=0.8, humidity=0.7,
        precipitation_weight=0.1, evaporation_factor=DEFAULT_EVAPORATION_FACTOR,
    ),
    TileType.HILLS: TileProperties(
        "hills", soil=0.2, water=0.8, humidity=0.7,
        precipitation_weight=0.2, evaporation_factor=DEFAULT_EVAPORATION_FACTOR,
    ),
    TileType.DESERT: TileProperties(
        "desert", soil=0.3, water=0.4, humidity=0.5,
        precipitation_weight=0.1, evaporation_factor=DEFAULT_EVAPORATION_FACTOR,
    ),
    TileType.DIRT: TileProperties(
        "dirt", soil=0.1, water=0.5, humidity=0.5,
        precipitation_weight=0.1, evaporation_factor=DEFAULT_EVAPORATION_FACTOR,
    ),
    TileType.ROCKY: TileProperties(
        "rocky", soil=0.1, water=0.5, humidity=0.5,
        precipitation_weight=0.2, evaporation_factor=DEFAULT_EVAPORATION_FACTOR,
    ),
    TileType.FOREST: TileProperties(
        "forest", soil=0.5, water=0.8, humidity=0.7,
        precipitation_weight=0.1, evaporation_factor=DEFAULT_EVAPORATION_FACTOR,
    ),
    TileType.ICE: TileProperties(
        "ice", soil=0.0, water=0.8, humidity=0.7,
        precipitation_weight=0.1, evaporation_factor=DEFAULT_EVAPORATION_FACTOR,
    ),
    TileType.JUNGLE: TileProperties(
        "jungle", soil=0.5, water=0.8, humidity=1.0,
        precipitation_weight=0.3, evaporation_factor=DEFAULT_EVAPORATION_FACTOR,
    ),
    TileType.SWAMP: TileProperties(
        "swamp", soil=0.5, water=1.0, humidity=1.0,
        precipitation_weight=0.3, evaporation_factor=DEFAULT_EVAPORATION_FACTOR,
    ),
    TileType.WASTE: TileProperties(
        "waste", soil=0.3, water=0.4, humidity=0.2,
        precipitation_weight=0.1, evaporation_factor=DEFAULT_EVAPORATION_FACTOR,
    ),
}


def initial_bundle(tile_type: TileType, bedrock: float, sea_level: float) -> Tuple[float, float, float]:
    """Starting (soil, water, humidity) for a freshly classified tile.

    Ocean water fills the basin up to sea level so that every ocean surface
    starts flat.
    """
    props = TILE_PROPERTIES[tile_type]
    if tile_type == TileType.OCEAN:
        water = max(sea_level - bedrock, 0.0)
    else:
        water = props.water
    return props.soil, water, props.humidity


def lookup_table(attribute: str) -> List[float]:
    """Per-type values of one TileProperties attribute, indexed by TileType.

    Used to vectorize per-type factors: table[state.tile_type] gives one
    value per tile.
    """
    return [getattr(TILE_PROPERTIES[t], attribute) for t in TileType]
