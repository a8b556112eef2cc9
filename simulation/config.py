# simulation/config.py
"""
Configuration constants for the simulation domain.
Includes sigmoid gating, per-tile weather factors and terrain morph tuning.
World-level tunables (erosion_factor etc.) come from WorldAttributes instead.
"""
from __future__ import annotations

# =============================================================================
# SIGMOID GATE
# =============================================================================
# sigmoid(k * (x - 1)): the share of a quantity allowed to move per epoch
# rises smoothly as the quantity approaches and passes 1.0.
SIGMOID_STEEPNESS = 1.0

# =============================================================================
# EVAPORATION
# =============================================================================
# Oceans evaporate faster to supply the planet with humidity
OCEAN_EVAPORATION_FACTOR = 2.0
DEFAULT_EVAPORATION_FACTOR = 1.0

# =============================================================================
# TERRAIN MORPH
# =============================================================================
# Transition odds (relative weights, not probabilities)
CERTAIN = 1.0
HIGH_ODDS = 0.8
MED_ODDS = 0.5
LOW_ODDS = 0.2

# Humidity thresholds for humidity-driven transitions
HIGH_HUMIDITY = 0.8
LOW_HUMIDITY = 0.2

# Standing water below this level dries out forests
LOW_WATER = 0.2

# Initial classification: temperatures at or below this share of
# base_temperature use the cool table
COOL_TEMPERATURE_RATIO = 0.85

# =============================================================================
# INVARIANTS
# =============================================================================
# Two heights closer than this count as a tie when picking the lowest neighbour
HEIGHT_TIE_EPSILON = 1e-6
