# game_state/initialization.py
"""World state initialization and world generation."""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from game_state.state import WorldState
from world.attributes import WorldAttributes
from world.biomes import classify_terrain
from world.generation import generate_map
from world.terrain import TileType, initial_bundle

logger = logging.getLogger(__name__)


def build_initial_state(
    attributes: WorldAttributes,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> WorldState:
    """Create a new world state with a generated map.

    Generator -> classifier -> per-tile starting bundle -> neighbour table.

    Args:
        attributes: World tunables
        seed: Overrides attributes.seed when given
        rng: Use this generator instead of seeding a new one
    """
    if rng is None:
        rng = np.random.default_rng(seed if seed is not None else attributes.seed)

    generated = generate_map(attributes, rng)
    n = len(generated.coords)

    tile_type = np.zeros(n, dtype=np.int8)
    soil = np.zeros(n, dtype=np.float64)
    water = np.zeros(n, dtype=np.float64)
    humidity = np.zeros(n, dtype=np.float64)

    altitude = generated.altitude.tolist()
    temperature = generated.temperature.tolist()
    for i in range(n):
        kind = classify_terrain(altitude[i], temperature[i], attributes, rng)
        tile_type[i] = int(kind)
        soil[i], water[i], humidity[i] = initial_bundle(kind, altitude[i], attributes.sea_level)

    # Flatten per-tile volcano distance lists into parallel arrays
    volcano_tiles = [i for i, dists in enumerate(generated.volcano_distances) for _ in dists]
    volcano_rings = [d for dists in generated.volcano_distances for d in dists]

    state = WorldState(
        coords=generated.coords,
        attributes=attributes,
        rng=rng,
        index_of=generated.index_of,
        tile_type=tile_type,
        bedrock=generated.altitude.copy(),
        soil=soil,
        water=water,
        humidity=humidity,
        temperature=generated.temperature.copy(),
        volcano_tiles=np.array(volcano_tiles, dtype=np.int64),
        volcano_rings=np.array(volcano_rings, dtype=np.int64),
    )

    counts = ", ".join(f"{t.label}={c}" for t, c in state.type_counts().items())
    logger.info("Built world with %d tiles (%s)", n, counts)
    state.messages.append(
        f"World built: {n} tiles, {len(generated.volcanoes)} volcanoes, "
        f"{state.type_counts().get(TileType.OCEAN, 0)} ocean tiles."
    )
    return state
