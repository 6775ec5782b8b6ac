"""Map generation configuration models."""

import tomllib
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class NoiseKind(str, Enum):
    """Noise function used to synthesize the height field."""

    PERLIN = "perlin"
    SIMPLEX = "simplex"
    WORLEY = "worley"


class FanSelection(str, Enum):
    """How a river step picks among the three cells of its bearing fan."""

    SYMMETRIC = "symmetric"
    CENTER_BIASED = "center_biased"


class NoiseConfig(BaseModel):
    """Height field noise parameters."""

    kind: NoiseKind = Field(default=NoiseKind.PERLIN, description="Noise function")
    offset_x: float = Field(default=0.0, description="Sampling offset along x in tiles")
    offset_y: float = Field(default=0.0, description="Sampling offset along y in tiles")
    scale: float = Field(
        default=10.0, description="Tiles per noise unit (larger = bigger biomes)"
    )


class BiomeConfig(BaseModel):
    """Tier thresholds and tile variants."""

    forest_threshold: float = Field(
        default=0.6, description="Heights at or above this are forest"
    )
    swamp_threshold: float = Field(
        default=0.35, description="Heights at or above this (and below forest) are swamp"
    )
    intra_thresholds: list[float] = Field(
        default_factory=lambda: [0.75, 0.5, 0.25, 0.0],
        description="Descending cutoffs selecting a variant inside a tier",
    )
    forest_tiles: list[str] = Field(
        default_factory=lambda: ["forest_peak", "forest_dense", "forest", "forest_edge"],
        description="Forest variants, one per intra threshold",
    )
    swamp_tiles: list[str] = Field(
        default_factory=lambda: ["swamp_dry", "swamp", "swamp_wet", "swamp_pool"],
        description="Swamp variants, one per intra threshold",
    )
    sea_tiles: list[str] = Field(
        default_factory=lambda: ["sea_shallow", "sea", "sea_deep", "sea_abyss"],
        description="Sea variants, one per intra threshold",
    )


class RiverConfig(BaseModel):
    """River carving parameters."""

    bias_coefficient: float = Field(
        default=0.65,
        description="Axis bias when choosing a bearing (recommended 0.5-0.8)",
    )
    fan_selection: FanSelection = Field(
        default=FanSelection.SYMMETRIC,
        description="Candidate selection rule for each river step",
    )
    max_steps: int | None = Field(
        default=None, description="Step cap per river (None = width * height)"
    )
    river_tile: str = Field(default="river", description="Tile identifier for river cells")


class MapConfig(BaseModel):
    """Complete map generation configuration."""

    width: int = Field(default=100, description="Map width in tiles")
    height: int = Field(default=100, description="Map height in tiles")
    seed: int = Field(default=0, description="Seed for noise permutation and lattice hashing")

    noise: NoiseConfig = Field(default_factory=NoiseConfig)
    biomes: BiomeConfig = Field(default_factory=BiomeConfig)
    rivers: RiverConfig = Field(default_factory=RiverConfig)

    # Debug options
    debug_output_dir: str | None = Field(
        default=None, description="Directory for debug images (None = disabled)"
    )


def load_config(config_path: Path) -> MapConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed MapConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return MapConfig.model_validate(data)
