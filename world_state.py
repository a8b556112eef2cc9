# world_state.py
"""Global world state tracking for conservation of mass and water.

Per-tile quantities live in WorldState arrays; this ledger keeps the running
totals that cross tile boundaries or leave the surface entirely:
- Water: rain onto land, evaporation into the air, overflow lost to oceans
- Rock: bedrock eroded away, soil deposited downstream, uplift from volcanoes
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class MassLedger:
    """Cumulative mass flows since the world was built.

    Ocean tiles are the terminal sink: water and soil overflowing into them
    are booked here instead of being added to the tile.
    """
    precipitated: float = 0.0           # Water rained onto land tiles
    evaporated: float = 0.0             # Water lifted into humidity (oceans included)
    ocean_absorbed_water: float = 0.0   # Overflow water swallowed by oceans
    ocean_absorbed_soil: float = 0.0    # Eroded material swallowed by oceans
    eroded_bedrock: float = 0.0         # Bedrock removed by overflow erosion
    deposited_soil: float = 0.0         # Eroded material landed as soil on land
    uplifted_bedrock: float = 0.0       # Bedrock added by vulcanism
    clamped: int = 0                    # Negative quantities clamped back to zero

    def record_erosion(self, eroded: float) -> None:
        self.eroded_bedrock += eroded

    def record_overflow_delivery(self, soil_on_land: float, water_to_ocean: float, soil_to_ocean: float) -> None:
        """Book where the overflow mailbox contents ended up."""
        self.deposited_soil += soil_on_land
        self.ocean_absorbed_water += water_to_ocean
        self.ocean_absorbed_soil += soil_to_ocean

    def sediment_in_transit(self) -> float:
        """Eroded material not yet accounted as soil or ocean sink.

        Zero between epochs: every eroded unit is delivered in the same epoch.
        """
        return self.eroded_bedrock - self.deposited_soil - self.ocean_absorbed_soil
