# world/generation.py
"""
Map generation for Terraflow.

Handles:
- Volcano seed placement
- Volcano-driven raising of the altitude field
- Per-tile ring distances to every volcano (reused by vulcanism each epoch)
- Temperature field from latitude and altitude
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, TYPE_CHECKING

import numpy as np

from grid_helpers import HexCoord, hexagon, latitude, ring

if TYPE_CHECKING:
    from world.attributes import WorldAttributes

logger = logging.getLogger(__name__)

# (tile ids, ring distances) reached by one volcano
VolcanoReach = Tuple[np.ndarray, np.ndarray]


@dataclass
class GeneratedMap:
    """Raw generator output, before terrain classification."""
    coords: List[HexCoord]
    index_of: Dict[HexCoord, int]
    volcanoes: np.ndarray
    altitude: np.ndarray
    temperature: np.ndarray
    volcano_distances: List[List[int]] = field(default_factory=list)
    passes: int = 0


# =============================================================================
# Volcanoes
# =============================================================================

def raise_probability(distance, mountain_spread: float):
    """Chance a tile ``distance`` rings from a volcano is raised.

    1.0 at the volcano itself, decaying linearly to 0 at mountain_spread.
    Accepts scalar or array distances.
    """
    d = np.asarray(distance, dtype=np.float64)
    if mountain_spread <= 0:
        prob = np.where(d == 0, 1.0, 0.0)
    else:
        prob = np.where(d == 0, 1.0, np.clip(1.0 - d / mountain_spread, 0.0, 1.0))
    if prob.ndim == 0:
        return float(prob)
    return prob


def pick_volcanoes(count: int, tile_count: int, rng: np.random.Generator) -> np.ndarray:
    """Choose ``count`` distinct tile ids uniformly at random.

    Asking for more volcanoes than tiles places one on every tile.
    """
    if count > tile_count:
        logger.warning(
            "vulcanism=%d exceeds the %d tiles on the map; clamping", count, tile_count
        )
        count = tile_count
    return rng.choice(tile_count, size=count, replace=False).astype(np.int64)


def volcano_reach(
    index_of: Dict[HexCoord, int],
    coords: List[HexCoord],
    volcanoes: np.ndarray,
    spread_rings: int,
) -> List[VolcanoReach]:
    """Tiles each volcano reaches, ring by ring, clipped to the map."""
    reach: List[VolcanoReach] = []
    for vid in volcanoes:
        center = coords[int(vid)]
        ids: List[int] = []
        dists: List[int] = []
        for d in range(spread_rings + 1):
            for coord in ring(center, d):
                idx = index_of.get(coord)
                if idx is not None:
                    ids.append(idx)
                    dists.append(d)
        reach.append((np.array(ids, dtype=np.int64), np.array(dists, dtype=np.int64)))
    return reach


def generate_altitude_map(
    attributes: "WorldAttributes",
    tile_count: int,
    volcanoes: np.ndarray,
    reach: List[VolcanoReach],
    rng: np.random.Generator,
) -> Tuple[np.ndarray, int]:
    """Raise terrain around the volcanoes until the tallest reaches highest_elevation.

    Every pass visits every volcano and each ring around it; a tile at ring d
    gains elevation_increment with probability 1 - d/mountain_spread.

    Returns:
        (altitude array, number of passes run)

    Raises:
        RuntimeError: the pass bound was exceeded without reaching the target.
    """
    altitude = np.zeros(tile_count, dtype=np.float64)
    if len(volcanoes) == 0:
        return altitude, 0

    increment = attributes.elevation_increment
    altitude[volcanoes] = increment

    probabilities = [raise_probability(dists, attributes.mountain_spread) for _, dists in reach]
    max_passes = math.ceil(attributes.highest_elevation / increment) + 1

    passes = 0
    while altitude[volcanoes].max() < attributes.highest_elevation:
        if passes >= max_passes:
            raise RuntimeError(
                f"Volcano raising did not reach {attributes.highest_elevation} "
                f"after {max_passes} passes"
            )
        for (ids, _), prob in zip(reach, probabilities):
            hit = rng.random(len(ids)) < prob
            np.add.at(altitude, ids[hit], increment)
        passes += 1

    logger.debug(
        "Raised %d volcanoes in %d passes (max altitude %.2f)",
        len(volcanoes), passes, float(altitude.max()),
    )
    return altitude, passes


def get_distances_from_volcanos(reach: List[VolcanoReach], tile_count: int) -> List[List[int]]:
    """Per-tile list of ring distances, one entry per volcano reaching it."""
    distances: List[List[int]] = [[] for _ in range(tile_count)]
    for ids, dists in reach:
        for idx, d in zip(ids.tolist(), dists.tolist()):
            distances[idx].append(d)
    return distances


# =============================================================================
# Temperature
# =============================================================================

def calculate_temperature(attributes: "WorldAttributes", altitude: float, lat: float) -> float:
    """Temperature of one tile from its altitude and latitude (rows from the equator)."""
    if attributes.map_radius > 0:
        normalized_lat = abs(lat) / attributes.map_radius
    else:
        normalized_lat = 0.0
    latitude_term = normalized_lat * attributes.latitude_temperature_variation
    altitude_term = altitude * attributes.altitude_temperature_variation if altitude > 0 else 0.0
    return attributes.base_temperature - altitude_term - latitude_term


def generate_temperature_map(
    attributes: "WorldAttributes",
    coords: List[HexCoord],
    altitude: np.ndarray,
) -> np.ndarray:
    """Vectorized calculate_temperature over every tile."""
    lats = np.abs(np.array([latitude(c) for c in coords], dtype=np.float64))
    if attributes.map_radius > 0:
        latitude_term = lats / attributes.map_radius * attributes.latitude_temperature_variation
    else:
        latitude_term = np.zeros_like(lats)
    altitude_term = np.where(altitude > 0, altitude * attributes.altitude_temperature_variation, 0.0)
    return attributes.base_temperature - altitude_term - latitude_term


# =============================================================================
# Full map
# =============================================================================

def generate_map(attributes: "WorldAttributes", rng: np.random.Generator) -> GeneratedMap:
    """Generate altitude, temperature and volcano distances for a fresh world."""
    coords = hexagon(attributes.map_radius)
    index_of = {c: i for i, c in enumerate(coords)}

    volcanoes = pick_volcanoes(attributes.vulcanism, len(coords), rng)
    reach = volcano_reach(index_of, coords, volcanoes, attributes.spread_rings)
    altitude, passes = generate_altitude_map(attributes, len(coords), volcanoes, reach, rng)
    temperature = generate_temperature_map(attributes, coords, altitude)

    logger.info(
        "Generated map: %d tiles, %d volcanoes, altitude %.2f..%.2f",
        len(coords), len(volcanoes), float(altitude.min()), float(altitude.max()),
    )
    return GeneratedMap(
        coords=coords,
        index_of=index_of,
        volcanoes=volcanoes,
        altitude=altitude,
        temperature=temperature,
        volcano_distances=get_distances_from_volcanos(reach, len(coords)),
        passes=passes,
    )
