# world/attributes.py
"""
World attributes: the read-only configuration every phase consumes.

Attributes are loaded once, before the world is built, from a JSON document
(defaults.json ships as the reference document). Missing keys fall back to
config.py; unknown keys and out-of-range values are configuration errors and
abort before anything is generated.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from config import DEFAULT_CONFIG_PATH, DEFAULT_WORLD_CONFIG

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a world config document is malformed or incomplete."""


@dataclass(frozen=True)
class WorldAttributes:
    """Immutable world tunables shared by generation and every epoch phase.

    mountain_spread is stored in rings (the config document gives it as a
    fraction of map_radius).
    """
    hex_size: float
    map_radius: int
    erosion_factor: float
    overflow_factor: float
    precipitation_factor: float
    evaporation_factor: float
    humidity_escape_factor: float
    highest_elevation: float
    vulcanism: int
    mountain_spread: float
    elevation_increment: float
    epoch_increment: float
    sea_level: float
    mountain_point: float
    hill_point: float
    soil_and_water_height_display_factor: float
    terrain_change_sensitivity: float
    base_temperature: float
    latitude_temperature_variation: float
    altitude_temperature_variation: float
    seed: Optional[int] = None

    @property
    def mountain_height(self) -> float:
        """Altitude at and above which a tile classifies as mountain."""
        return self.highest_elevation * self.mountain_point

    @property
    def hill_height(self) -> float:
        """Altitude at and above which a tile classifies as hills or rocky."""
        return self.highest_elevation * self.hill_point

    @property
    def spread_rings(self) -> int:
        """Whole rings a volcano reaches."""
        return int(self.mountain_spread)

    @classmethod
    def from_dict(cls, document: Mapping[str, Any]) -> "WorldAttributes":
        """Build attributes from a config mapping, filling gaps from defaults.

        Raises:
            ConfigError: unknown keys, wrong types or out-of-range values.
        """
        if not isinstance(document, Mapping):
            raise ConfigError(f"Config document must be an object, not {type(document).__name__}")

        unknown = sorted(set(document) - set(DEFAULT_WORLD_CONFIG))
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

        merged: Dict[str, Any] = dict(DEFAULT_WORLD_CONFIG)
        merged.update(document)

        values: Dict[str, Any] = {}
        for field_info in fields(cls):
            name = field_info.name
            raw = merged.get(name)
            if name == "seed":
                values[name] = _coerce_seed(raw)
            elif name in ("map_radius", "vulcanism"):
                values[name] = _coerce_int(name, raw)
            else:
                values[name] = _coerce_float(name, raw)

        # The document gives spread as a share of the map radius
        values["mountain_spread"] = values["mountain_spread"] * values["map_radius"]

        attributes = cls(**values)
        attributes.validate()
        return attributes

    def validate(self) -> None:
        """Check value ranges. Raises ConfigError on the first problem."""
        if self.map_radius < 0:
            raise ConfigError("map_radius must be >= 0")
        if self.hex_size <= 0:
            raise ConfigError("hex_size must be > 0")
        if self.vulcanism < 1:
            raise ConfigError("vulcanism must be >= 1")
        if self.elevation_increment <= 0:
            raise ConfigError("elevation_increment must be > 0")
        if self.highest_elevation <= 0:
            raise ConfigError("highest_elevation must be > 0")
        if self.base_temperature <= 0:
            raise ConfigError("base_temperature must be > 0")
        if not 0.0 <= self.hill_point <= self.mountain_point:
            raise ConfigError("hill_point must satisfy 0 <= hill_point <= mountain_point")
        for name in (
            "erosion_factor",
            "overflow_factor",
            "precipitation_factor",
            "evaporation_factor",
            "humidity_escape_factor",
            "epoch_increment",
            "mountain_spread",
            "terrain_change_sensitivity",
        ):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0")


def _coerce_float(name: str, raw: Any) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    return float(raw)


def _coerce_int(name: str, raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if isinstance(raw, float) and not raw.is_integer():
        raise ConfigError(f"{name} must be a whole number, got {raw!r}")
    return int(raw)


def _coerce_seed(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    return _coerce_int("seed", raw)


def load_world_attributes(
    path: Union[str, Path, None] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> WorldAttributes:
    """Load world attributes from a JSON config document.

    Args:
        path: Config file. Defaults to defaults.json next to config.py.
        overrides: Keys applied on top of the file (e.g. from the CLI).

    Raises:
        ConfigError: missing file, invalid JSON, or invalid values.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    try:
        with config_path.open("r", encoding="utf-8") as f:
            document = json.load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {config_path} is not valid JSON: {exc}") from exc

    if overrides:
        if not isinstance(document, dict):
            raise ConfigError(f"Config document in {config_path} must be an object")
        document = {**document, **overrides}

    attributes = WorldAttributes.from_dict(document)
    logger.info(
        "Loaded world attributes from %s (radius=%d, vulcanism=%d, seed=%s)",
        config_path, attributes.map_radius, attributes.vulcanism, attributes.seed,
    )
    return attributes
