# grid_helpers.py
"""Helper functions for hex grid geometry.

Tiles are addressed with axial coordinates (q, r). The map is a hexagon of a
given radius centred on (0, 0). These helpers provide the shape, ring and
neighbour queries the simulation builds on, plus the pointy-top layout used
by renderers to place tiles.

Hex edge numbering (clockwise from East):
    Edge 0: E   (+1,  0)
    Edge 1: NE  (+1, -1)
    Edge 2: NW  ( 0, -1)
    Edge 3: W   (-1,  0)
    Edge 4: SW  (-1, +1)
    Edge 5: SE  ( 0, +1)
"""
from __future__ import annotations

import math
from typing import List, Tuple

HexCoord = Tuple[int, int]

# Neighbor offsets indexed by edge number (clockwise from E)
HEX_DIRECTIONS: List[HexCoord] = [
    (+1, 0),   # Edge 0: E
    (+1, -1),  # Edge 1: NE
    (0, -1),   # Edge 2: NW
    (-1, 0),   # Edge 3: W
    (-1, +1),  # Edge 4: SW
    (0, +1),   # Edge 5: SE
]


def hex_distance(a: HexCoord, b: HexCoord) -> int:
    """Axial hex distance between two coordinates.

    Example: (0,0) to (2,-1) -> 2
    """
    dq = a[0] - b[0]
    dr = a[1] - b[1]
    return (abs(dq) + abs(dq + dr) + abs(dr)) // 2


def hexagon(radius: int, center: HexCoord = (0, 0)) -> List[HexCoord]:
    """All coordinates within ``radius`` of center, ordered by q then r.

    A hexagon of radius R holds 3R(R+1) + 1 tiles.
    """
    cq, cr = center
    coords = []
    for dq in range(-radius, radius + 1):
        r_min = max(-radius, -dq - radius)
        r_max = min(radius, -dq + radius)
        for dr in range(r_min, r_max + 1):
            coords.append((cq + dq, cr + dr))
    return coords


def ring(center: HexCoord, distance: int) -> List[HexCoord]:
    """Coordinates exactly ``distance`` steps from center.

    Distance 0 is the center itself; distance d > 0 yields 6d coordinates.
    """
    if distance <= 0:
        return [center]

    # Start at the SW corner and walk each of the six edges
    q = center[0] + HEX_DIRECTIONS[4][0] * distance
    r = center[1] + HEX_DIRECTIONS[4][1] * distance
    results = []
    for direction in range(6):
        dq, dr = HEX_DIRECTIONS[direction]
        for _ in range(distance):
            results.append((q, r))
            q += dq
            r += dr
    return results


def neighbors(coord: HexCoord) -> List[HexCoord]:
    """The six adjacent coordinates, in edge order."""
    q, r = coord
    return [(q + dq, r + dr) for dq, dr in HEX_DIRECTIONS]


def hex_to_world(coord: HexCoord, hex_size: float) -> Tuple[float, float]:
    """Centre of a hex in world units for a pointy-top layout.

    Args:
        coord: Axial (q, r)
        hex_size: Outer radius of one hex

    Returns:
        (x, y) world position
    """
    q, r = coord
    x = hex_size * (math.sqrt(3.0) * q + math.sqrt(3.0) / 2.0 * r)
    y = hex_size * (1.5 * r)
    return x, y


def latitude(coord: HexCoord) -> int:
    """Latitude of a tile in rows from the equator (the r axis)."""
    return coord[1]
