"""Shared fixtures for Terraflow tests."""
from __future__ import annotations

from typing import Dict, Optional

import numpy as np
import pytest

from game_state.state import WorldState
from grid_helpers import hexagon
from world.attributes import WorldAttributes
from world.terrain import TileType


SMALL_WORLD = {
    "seed": 7,
    "map_radius": 4,
    "vulcanism": 2,
    "mountain_spread": 0.5,
    "highest_elevation": 3.0,
    "elevation_increment": 0.1,
}


@pytest.fixture
def attributes() -> WorldAttributes:
    """A small world: radius 4, two volcanoes."""
    return WorldAttributes.from_dict(SMALL_WORLD)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


def make_state(
    attributes: WorldAttributes,
    radius: int = 1,
    tile_type: TileType = TileType.GRASS,
    seed: int = 0,
    **arrays: Optional[Dict],
) -> WorldState:
    """Hand-built state on a hexagon of ``radius``.

    Per-tile values are given as {coord: value} dicts keyed by axial
    coordinate; unlisted tiles are zero (tile_type: the given default).
    """
    if isinstance(tile_type, dict):
        arrays["tile_type"] = tile_type
        tile_type = TileType.GRASS
    coords = hexagon(radius)
    state = WorldState(coords=coords, attributes=attributes, rng=np.random.default_rng(seed))
    state.tile_type[:] = int(tile_type)
    for name, values in arrays.items():
        target = getattr(state, name)
        for coord, value in values.items():
            target[state.index_of[coord]] = int(value) if name == "tile_type" else value
    return state


@pytest.fixture
def build_state(attributes):
    """Factory for hand-built states; radius 1 gives a centre tile and six neighbours."""
    def build(radius: int = 1, tile_type: TileType = TileType.GRASS, seed: int = 0, **arrays) -> WorldState:
        return make_state(attributes, radius=radius, tile_type=tile_type, seed=seed, **arrays)
    return build
