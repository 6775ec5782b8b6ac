"""Main map generation orchestration."""

from pathlib import Path

import numpy as np
import structlog
from numpy.typing import NDArray

from ..tile_types import TileKind
from ..types import Position
from .classification import TileAssignment, build_tiers, classify_biomes
from .config import MapConfig
from .features import Features, detect_features
from .fields import make_height_field
from .hydrology import River, carve_rivers
from .validation import ValidationResult, validate_config, validate_map

logger = structlog.get_logger()


class GenerationResult:
    """Result of map generation with all intermediate data."""

    def __init__(
        self,
        config: MapConfig,
        height_field: NDArray[np.float64],
        features: Features,
        rivers: list[River],
        river_cells: set[Position],
        occupancy: NDArray[np.bool_],
        tiles: TileAssignment,
        validation: ValidationResult,
    ):
        self.config = config
        self.height_field = height_field
        self.features = features
        self.rivers = rivers
        self.river_cells = river_cells
        self.occupancy = occupancy
        self.tiles = tiles
        self.validation = validation


def generate_map(config: MapConfig) -> GenerationResult:
    """Generate a complete map from configuration.

    Args:
        config: Map generation configuration.

    Returns:
        GenerationResult with the tile assignment and river cells.

    Raises:
        ConfigurationError: If the configuration is rejected.
        ClassificationError: If a cell cannot be classified.
    """
    validate_config(config)

    logger.info(
        "generating_map",
        width=config.width,
        height=config.height,
        noise=config.noise.kind.value,
        seed=config.seed,
    )

    # Stage A: Height field
    height_field = make_height_field(config.width, config.height, config.noise, config.seed)

    return _run_phases(height_field, config)


def build_map(height_field: NDArray[np.float64], config: MapConfig) -> GenerationResult:
    """Run every phase after noise synthesis on a given height field.

    The field's shape overrides config.width and config.height.

    Args:
        height_field: 2D height array of shape (height, width) in [0, 1].
        config: Map generation configuration.

    Returns:
        GenerationResult with the tile assignment and river cells.

    Raises:
        ConfigurationError: If the configuration is rejected.
        ClassificationError: If a cell cannot be classified.
    """
    validate_config(config)
    return _run_phases(height_field, config)


def _run_phases(height_field: NDArray[np.float64], config: MapConfig) -> GenerationResult:
    biomes = config.biomes

    # Stage B: Peaks and lake bottoms
    features = detect_features(
        height_field,
        biomes.forest_threshold,
        biomes.swamp_threshold,
        biomes.intra_thresholds[0],
    )

    # Stage C: Rivers (sequential, order-dependent)
    occupancy = np.zeros(height_field.shape, dtype=bool)
    river_cells, rivers = carve_rivers(
        height_field,
        occupancy,
        features.peaks,
        features.lake_bottoms,
        biomes.swamp_threshold,
        config.rivers,
    )

    # Stage D: Biome fill for every unclaimed cell
    tiers = build_tiers(biomes)
    tiles = classify_biomes(
        height_field,
        occupancy,
        tiers,
        biomes.intra_thresholds,
        river_cells,
        config.rivers.river_tile,
    )

    # Stage E: Validation
    validation = validate_map(height_field, tiles, river_cells, occupancy, config)
    _log_map_stats(tiles)

    # Debug output if enabled
    if config.debug_output_dir:
        _dump_debug_images(
            Path(config.debug_output_dir),
            height_field=height_field,
            river_mask=tiles.mask(TileKind.RIVER),
            tile_kinds=tiles.kinds,
        )

    return GenerationResult(
        config=config,
        height_field=height_field,
        features=features,
        rivers=rivers,
        river_cells=river_cells,
        occupancy=occupancy,
        tiles=tiles,
        validation=validation,
    )


def _log_map_stats(tiles: TileAssignment) -> None:
    """Log tile kind statistics."""
    total = tiles.kinds.size
    for kind, count in tiles.counts().items():
        pct = count / total * 100 if total else 0.0
        logger.info("tile_kind_stats", kind=kind.value, count=count, percent=round(pct, 1))


def _dump_debug_images(output_dir: Path, **arrays: NDArray) -> None:
    """Save arrays as images for debugging.

    Args:
        output_dir: Directory to save images.
        **arrays: Named arrays to save.
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        logger.warning("matplotlib_unavailable", skipped="debug_images")
        return

    output_dir.mkdir(parents=True, exist_ok=True)

    for name, arr in arrays.items():
        fig, ax = plt.subplots(figsize=(10, 10))

        if arr.dtype == bool:
            ax.imshow(arr, cmap="binary")
        elif arr.dtype == np.uint8:
            ax.imshow(arr, cmap="tab10")
        else:
            ax.imshow(arr, cmap="terrain")

        ax.set_title(name)
        ax.axis("off")

        fig.savefig(output_dir / f"{name}.png", dpi=150, bbox_inches="tight")
        plt.close(fig)

    logger.info("debug_images_saved", output_dir=str(output_dir))
