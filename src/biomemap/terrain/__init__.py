"""Procedural tile map generation package.

This package implements noise-based height fields, peak and lake
detection, river carving and nested-threshold biome classification.
"""

from .classification import ThresholdTier, TileAssignment, build_tiers, classify_height
from .config import (
    BiomeConfig,
    FanSelection,
    MapConfig,
    NoiseConfig,
    NoiseKind,
    RiverConfig,
    load_config,
)
from .features import Features, detect_features
from .generator import GenerationResult, build_map, generate_map
from .hydrology import River, carve_rivers
from .validation import ValidationResult, validate_config, validate_map

__all__ = [
    "BiomeConfig",
    "FanSelection",
    "Features",
    "GenerationResult",
    "MapConfig",
    "NoiseConfig",
    "NoiseKind",
    "River",
    "RiverConfig",
    "ThresholdTier",
    "TileAssignment",
    "ValidationResult",
    "build_map",
    "build_tiers",
    "carve_rivers",
    "classify_height",
    "detect_features",
    "generate_map",
    "load_config",
    "validate_config",
    "validate_map",
]
