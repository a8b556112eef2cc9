# world/__init__.py
"""
World module: attributes, terrain, biomes, epoch counter and map generation.

Provides:
- World attributes and config loading (from attributes.py)
- Terrain types and starting bundles (from terrain.py)
- Terrain classification and morph rules (from biomes.py)
- Epoch counter (from weather.py)
- Map generation (from generation.py)
"""

# Config
from world.attributes import ConfigError, WorldAttributes, load_world_attributes

# Core terrain types
from world.terrain import TILE_PROPERTIES, TileProperties, TileType, initial_bundle

# Biome system
from world.biomes import classify_terrain, morph_terrain, transition_candidates

# Epoch counter
from world.weather import EpochCounter

# Map generation
from world.generation import GeneratedMap, generate_map

__all__ = [
    # Config
    "ConfigError",
    "WorldAttributes",
    "load_world_attributes",
    # Terrain
    "TILE_PROPERTIES",
    "TileProperties",
    "TileType",
    "initial_bundle",
    # Biomes
    "classify_terrain",
    "morph_terrain",
    "transition_candidates",
    # Epochs
    "EpochCounter",
    # Generation
    "GeneratedMap",
    "generate_map",
]
