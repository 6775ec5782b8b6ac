"""Procedural biome and river tile map generation."""

from .exceptions import (
    ClassificationError,
    ConfigurationError,
    MapGenError,
    RiverWalkError,
)
from .terrain import GenerationResult, MapConfig, build_map, generate_map, load_config
from .tile_types import TileKind, TileType
from .types import DIRECTION_DELTAS, Direction, Position

__all__ = [
    # Types
    "Direction",
    "Position",
    "DIRECTION_DELTAS",
    "TileKind",
    "TileType",
    # Generation
    "MapConfig",
    "GenerationResult",
    "generate_map",
    "build_map",
    "load_config",
    # Exceptions
    "MapGenError",
    "ConfigurationError",
    "ClassificationError",
    "RiverWalkError",
]
