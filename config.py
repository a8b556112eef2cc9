# config.py
"""
Centralized default configuration for Terraflow.

This file contains the fallback values for every world tunable and a few
cross-cutting constants. A world is normally built from a JSON document
(see defaults.json) loaded through world.attributes; any key missing from
that document falls back to the values here.

Domain-specific constants live in:
- simulation/config.py (sigmoid steepness, tile factors, morph thresholds)
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Union

# =============================================================================
# PATHS
# =============================================================================
PROJECT_ROOT = Path(__file__).parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "defaults.json"

# =============================================================================
# MAP
# =============================================================================
HEX_SIZE = 2.0          # Outer radius of a hex in world units (pointy layout)
MAP_RADIUS = 20         # Radius of the hexagon map, in rings

# =============================================================================
# ELEVATION
# =============================================================================
HIGHEST_ELEVATION = 10.0     # Volcano raising stops once a volcano reaches this
VULCANISM = 6                # Number of volcano seeds
MOUNTAIN_SPREAD = 0.6        # Volcano reach as a fraction of MAP_RADIUS
ELEVATION_INCREMENT = 0.1    # Bedrock step used while building the map
EPOCH_INCREMENT = 0.01       # Bedrock step used by vulcanism every epoch
SEA_LEVEL = 1.0              # Altitude at or below which tiles start as ocean
MOUNTAIN_POINT = 0.8         # Fraction of HIGHEST_ELEVATION for mountains
HILL_POINT = 0.6             # Fraction of HIGHEST_ELEVATION for hills
SOIL_AND_WATER_HEIGHT_DISPLAY_FACTOR = 1.0

# =============================================================================
# EROSION & ECOSYSTEM
# =============================================================================
EROSION_FACTOR = 0.05            # Bedrock erosion per unit soil x overflow
OVERFLOW_FACTOR = 0.5            # Share of excess water that spills per epoch
PRECIPITATION_FACTOR = 0.03
EVAPORATION_FACTOR = 0.03
HUMIDITY_ESCAPE_FACTOR = 0.5     # Share of gated humidity drifting uphill
TERRAIN_CHANGE_SENSITIVITY = 0.1 # Lower = terrain reacts to smaller water surplus

# =============================================================================
# TEMPERATURE
# =============================================================================
BASE_TEMPERATURE = 30.0
LATITUDE_TEMPERATURE_VARIATION = 30.0
ALTITUDE_TEMPERATURE_VARIATION = 2.0

# =============================================================================
# CONFIG DOCUMENT DEFAULTS
# =============================================================================
# Keys accepted in the JSON config document. mountain_spread is given here as
# a fraction of map_radius and converted to rings when attributes are built.
DEFAULT_WORLD_CONFIG: Dict[str, Union[int, float, None]] = {
    "seed": None,
    "hex_size": HEX_SIZE,
    "map_radius": MAP_RADIUS,
    "erosion_factor": EROSION_FACTOR,
    "overflow_factor": OVERFLOW_FACTOR,
    "precipitation_factor": PRECIPITATION_FACTOR,
    "evaporation_factor": EVAPORATION_FACTOR,
    "humidity_escape_factor": HUMIDITY_ESCAPE_FACTOR,
    "highest_elevation": HIGHEST_ELEVATION,
    "vulcanism": VULCANISM,
    "mountain_spread": MOUNTAIN_SPREAD,
    "elevation_increment": ELEVATION_INCREMENT,
    "epoch_increment": EPOCH_INCREMENT,
    "sea_level": SEA_LEVEL,
    "mountain_point": MOUNTAIN_POINT,
    "hill_point": HILL_POINT,
    "soil_and_water_height_display_factor": SOIL_AND_WATER_HEIGHT_DISPLAY_FACTOR,
    "terrain_change_sensitivity": TERRAIN_CHANGE_SENSITIVITY,
    "base_temperature": BASE_TEMPERATURE,
    "latitude_temperature_variation": LATITUDE_TEMPERATURE_VARIATION,
    "altitude_temperature_variation": ALTITUDE_TEMPERATURE_VARIATION,
}

# =============================================================================
# RUNTIME
# =============================================================================
MESSAGE_LOG_SIZE = 100       # Entries kept in WorldState.messages
TICKS_PER_EPOCH = 3          # Transitions per epoch in a batch (plus one to return to WAITING)
