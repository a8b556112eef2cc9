# game_state/state.py
"""Core world state data structures.

Tiles live in a struct-of-arrays arena: tile id i indexes every per-tile
array below. Neighbour-coupled phases only ever write to the mailbox arrays
(incoming_water, incoming_soil, pending_humidity), never to a neighbour's
own quantities.
"""
from __future__ import annotations

import collections
import logging
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Tuple

import numpy as np

from config import MESSAGE_LOG_SIZE
from grid_helpers import HexCoord, neighbors
from world.attributes import WorldAttributes
from world.terrain import TileType
from world.weather import EpochCounter
from world_state import MassLedger

logger = logging.getLogger(__name__)

# Quantities that must never go negative
CLAMPED_QUANTITIES = ("bedrock", "soil", "water", "humidity")

# Last-epoch weather values kept per tile for inspection
DEBUG_FIELDS = (
    "precipitation",
    "evaporation",
    "overflow_water",
    "overflow_soil",
    "overflow_received_water",
    "overflow_received_soil",
    "humidity_sent",
    "humidity_received",
)


@dataclass
class WorldState:
    """Main world state container.

    Built by game_state.initialization.build_initial_state. Arrays left as
    None are allocated as zeros for the given coordinates.
    """
    coords: List[HexCoord]
    attributes: WorldAttributes
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    index_of: Dict[HexCoord, int] = field(default_factory=dict)
    # Shape: (N, 6), dtype=int64. Neighbour tile id per hex edge, -1 off the map
    neighbour_ids: np.ndarray | None = None

    # === Tile Quantities ===
    tile_type: np.ndarray | None = None     # (N,) int8, TileType values
    bedrock: np.ndarray | None = None       # (N,) float64
    soil: np.ndarray | None = None          # (N,) float64
    water: np.ndarray | None = None         # (N,) float64
    humidity: np.ndarray | None = None      # (N,) float64
    temperature: np.ndarray | None = None   # (N,) float64, static after world build

    # === Mailboxes (zero at the start of every epoch) ===
    incoming_water: np.ndarray | None = None
    incoming_soil: np.ndarray | None = None
    pending_humidity: np.ndarray | None = None

    # === Neighbour Analysis (recomputed every epoch) ===
    # Shape: (N, 6). Combined height per neighbour slot, NaN off the map
    neighbour_heights: np.ndarray | None = None
    lower_mask: np.ndarray | None = None    # (N, 6) bool, strictly lower neighbours
    higher_mask: np.ndarray | None = None   # (N, 6) bool, equal or higher neighbours

    # === Volcano Influence (static) ===
    # One entry per (tile, volcano) pair within mountain_spread rings
    volcano_tiles: np.ndarray | None = None     # (M,) int64 tile ids
    volcano_rings: np.ndarray | None = None     # (M,) int64 ring distances

    # === Debug Weather Fields (last epoch) ===
    precipitation: np.ndarray | None = None
    evaporation: np.ndarray | None = None
    overflow_water: np.ndarray | None = None    # Also the previous overflow fed to erosion
    overflow_soil: np.ndarray | None = None
    overflow_received_water: np.ndarray | None = None
    overflow_received_soil: np.ndarray | None = None
    humidity_sent: np.ndarray | None = None
    humidity_received: np.ndarray | None = None

    # Tiles whose type changed since the last visual sync
    changed: np.ndarray | None = None

    epochs: EpochCounter = field(default_factory=EpochCounter)
    ledger: MassLedger = field(default_factory=MassLedger)
    messages: Deque[str] = field(default_factory=lambda: collections.deque(maxlen=MESSAGE_LOG_SIZE))

    def __post_init__(self) -> None:
        n = len(self.coords)
        if not self.index_of:
            self.index_of = {c: i for i, c in enumerate(self.coords)}
        if self.neighbour_ids is None:
            self.neighbour_ids = build_neighbour_table(self.coords, self.index_of)

        for name in CLAMPED_QUANTITIES + ("temperature",) + DEBUG_FIELDS:
            if getattr(self, name) is None:
                setattr(self, name, np.zeros(n, dtype=np.float64))
        for name in ("incoming_water", "incoming_soil", "pending_humidity"):
            if getattr(self, name) is None:
                setattr(self, name, np.zeros(n, dtype=np.float64))
        if self.tile_type is None:
            self.tile_type = np.full(n, int(TileType.GRASS), dtype=np.int8)
        if self.changed is None:
            self.changed = np.zeros(n, dtype=bool)
        if self.neighbour_heights is None:
            self.neighbour_heights = np.full((n, 6), np.nan, dtype=np.float64)
        if self.lower_mask is None:
            self.lower_mask = np.zeros((n, 6), dtype=bool)
        if self.higher_mask is None:
            self.higher_mask = np.zeros((n, 6), dtype=bool)
        if self.volcano_tiles is None:
            self.volcano_tiles = np.zeros(0, dtype=np.int64)
        if self.volcano_rings is None:
            self.volcano_rings = np.zeros(0, dtype=np.int64)

    # === Geometry ===
    @property
    def tile_count(self) -> int:
        return len(self.coords)

    @property
    def neighbour_valid(self) -> np.ndarray:
        """(N, 6) mask of neighbour slots that exist on the map."""
        return self.neighbour_ids >= 0

    def combined_height(self) -> np.ndarray:
        """bedrock + soil + water for every tile."""
        return self.bedrock + self.soil + self.water

    def neighbours(self, i: int) -> List[int]:
        """Neighbour ids of tile i in edge order (edge tiles have fewer)."""
        return [int(n) for n in self.neighbour_ids[i] if n >= 0]

    def lower_neighbours(self, i: int) -> List[Tuple[int, float]]:
        """(id, combined height) of neighbours strictly below tile i."""
        return self._masked_neighbours(i, self.lower_mask)

    def higher_neighbours(self, i: int) -> List[Tuple[int, float]]:
        """(id, combined height) of neighbours level with or above tile i."""
        return self._masked_neighbours(i, self.higher_mask)

    def _masked_neighbours(self, i: int, mask: np.ndarray) -> List[Tuple[int, float]]:
        slots = np.flatnonzero(mask[i])
        return [(int(self.neighbour_ids[i, s]), float(self.neighbour_heights[i, s])) for s in slots]

    def volcano_distances(self, i: int) -> List[int]:
        """Ring distances from every volcano reaching tile i."""
        return self.volcano_rings[self.volcano_tiles == i].tolist()

    # === Invariants ===
    def clamp_quantities(self, phase: str) -> int:
        """Clamp negative bedrock/soil/water/humidity to zero.

        Negative values only appear through floating point drift; they are
        logged, counted in the ledger, and never carried forward.

        Returns:
            Number of values clamped.
        """
        total = 0
        for name in CLAMPED_QUANTITIES:
            values = getattr(self, name)
            negative = values < 0
            count = int(np.count_nonzero(negative))
            if count:
                logger.warning(
                    "%s: clamped %d negative %s values (min %.3g)",
                    phase, count, name, float(values[negative].min()),
                )
                values[negative] = 0.0
                total += count
        self.ledger.clamped += total
        return total

    # === Change Tracking ===
    def take_changed_tiles(self) -> List[int]:
        """Ids of tiles whose type changed since the last call; clears the flags."""
        ids = np.flatnonzero(self.changed).tolist()
        self.changed[:] = False
        return ids

    # === Read Accessors ===
    def tile_snapshot(self, i: int) -> Dict[str, Any]:
        """Everything a renderer or inspector needs to show one tile."""
        factor = self.attributes.soil_and_water_height_display_factor
        snapshot: Dict[str, Any] = {
            "id": i,
            "coordinate": self.coords[i],
            "terrain_type": TileType(int(self.tile_type[i])),
            "bedrock": float(self.bedrock[i]),
            "soil": float(self.soil[i]),
            "water": float(self.water[i]),
            "humidity": float(self.humidity[i]),
            "temperature": float(self.temperature[i]),
            "display_height": float(self.bedrock[i] + (self.soil[i] + self.water[i]) * factor),
            "lower_neighbours": len(self.lower_neighbours(i)),
            "higher_neighbours": len(self.higher_neighbours(i)),
            "volcano_distances": self.volcano_distances(i),
        }
        for name in DEBUG_FIELDS:
            snapshot[name] = float(getattr(self, name)[i])
        return snapshot

    def survey(self, coord: HexCoord) -> Dict[str, Any]:
        """tile_snapshot by coordinate. Raises KeyError off the map."""
        if coord not in self.index_of:
            raise KeyError(f"No tile at {coord}")
        return self.tile_snapshot(self.index_of[coord])

    def type_counts(self) -> Dict[TileType, int]:
        """How many tiles hold each terrain type."""
        counts = np.bincount(self.tile_type.astype(np.int64), minlength=len(TileType))
        return {t: int(counts[t]) for t in TileType if counts[t]}


def build_neighbour_table(coords: List[HexCoord], index_of: Dict[HexCoord, int]) -> np.ndarray:
    """(N, 6) neighbour ids in edge order, -1 where the neighbour is off the map."""
    table = np.full((len(coords), 6), -1, dtype=np.int64)
    for i, (q, r) in enumerate(coords):
        for edge, neighbour in enumerate(neighbors((q, r))):
            table[i, edge] = index_of.get(neighbour, -1)
    return table
