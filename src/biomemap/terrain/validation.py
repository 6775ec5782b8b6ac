"""Configuration checks and post-generation validation."""

import numpy as np
import structlog
from numpy.typing import NDArray

from ..exceptions import ConfigurationError
from ..tile_types import TileKind
from ..types import Position
from .classification import TileAssignment, build_tiers
from .config import BiomeConfig, MapConfig

logger = structlog.get_logger()

RECOMMENDED_BIAS_RANGE = (0.5, 0.8)


def validate_config(config: MapConfig) -> None:
    """Reject configurations that cannot produce a consistent map.

    All problems are collected and reported together.

    Args:
        config: Map configuration.

    Raises:
        ConfigurationError: If any check fails.
    """
    problems: list[str] = []

    if config.width <= 0 or config.height <= 0:
        problems.append(f"map size must be positive, got {config.width}x{config.height}")

    if config.noise.scale <= 0:
        problems.append(f"noise scale must be > 0, got {config.noise.scale}")

    _check_biomes(config.biomes, problems)

    bias = config.rivers.bias_coefficient
    if not 0.0 < bias <= 1.0:
        problems.append(f"river bias coefficient must be in (0, 1], got {bias}")

    if config.rivers.max_steps is not None and config.rivers.max_steps <= 0:
        problems.append(f"river max_steps must be positive, got {config.rivers.max_steps}")

    if problems:
        raise ConfigurationError(problems)

    low, high = RECOMMENDED_BIAS_RANGE
    if not low <= bias <= high:
        logger.warning("bias_coefficient_outside_recommended_range", bias=bias, low=low, high=high)


def _check_biomes(biomes: BiomeConfig, problems: list[str]) -> None:
    """Check tier and intra-biome thresholds."""
    for name in ("forest_threshold", "swamp_threshold"):
        value = getattr(biomes, name)
        if not 0.0 <= value <= 1.0:
            problems.append(f"{name} must be in [0, 1], got {value}")

    if biomes.swamp_threshold > biomes.forest_threshold:
        problems.append(
            f"swamp threshold {biomes.swamp_threshold} must not exceed "
            f"forest threshold {biomes.forest_threshold}"
        )

    thresholds = biomes.intra_thresholds
    if not thresholds:
        problems.append("at least one intra-biome threshold is required")

    for value in thresholds:
        if not 0.0 <= value <= 1.0:
            problems.append(f"intra-biome threshold {value} outside [0, 1]")

    for i in range(1, len(thresholds)):
        if thresholds[i] > thresholds[i - 1]:
            problems.append(
                f"intra-biome thresholds must be descending, "
                f"got {thresholds[i - 1]} before {thresholds[i]}"
            )
            break

    for name in ("forest_tiles", "swamp_tiles", "sea_tiles"):
        tiles = getattr(biomes, name)
        if len(tiles) != len(thresholds):
            problems.append(
                f"{name} has {len(tiles)} variants but there are "
                f"{len(thresholds)} intra-biome thresholds"
            )


class ValidationResult:
    """Result of map validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


def validate_map(
    height_field: NDArray[np.float64],
    tiles: TileAssignment,
    river_cells: set[Position],
    occupancy: NDArray[np.bool_],
    config: MapConfig,
) -> ValidationResult:
    """Validate a generated map against its invariants.

    Args:
        height_field: 2D height array indexed [y, x].
        tiles: Final tile assignment.
        river_cells: Cells claimed by rivers.
        occupancy: Occupancy grid after classification.
        config: Generation configuration.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()

    # Check 1: River cells sit at or above the swamp threshold
    _check_river_heights(height_field, river_cells, config.biomes.swamp_threshold, result)

    # Check 2: River and biome tiles are mutually exclusive
    _check_mutual_exclusion(tiles, river_cells, result)

    # Check 3: Every cell was claimed
    unclaimed = int(np.sum(~occupancy))
    if unclaimed > 0:
        result.add_error(f"{unclaimed} cells were never claimed")

    # Check 4: Chosen tier and variant bracket each cell's height
    _check_brackets(height_field, tiles, config.biomes, result)

    if not river_cells:
        result.add_warning("No river cells were carved")

    if result.passed:
        logger.info("map_validation_passed", warnings=len(result.warnings))
    else:
        logger.warning("map_validation_failed", errors=len(result.errors))
        for error in result.errors:
            logger.error("map_validation_error", error=error)

    for warning in result.warnings:
        logger.warning("map_validation_warning", warning=warning)

    return result


def _check_river_heights(
    height_field: NDArray[np.float64],
    river_cells: set[Position],
    swamp_threshold: float,
    result: ValidationResult,
) -> None:
    low = [cell for cell in river_cells if height_field[cell.y, cell.x] < swamp_threshold]
    if low:
        result.add_error(f"{len(low)} river cells lie below the swamp threshold")


def _check_mutual_exclusion(
    tiles: TileAssignment,
    river_cells: set[Position],
    result: ValidationResult,
) -> None:
    river_mask = np.zeros((tiles.height, tiles.width), dtype=bool)
    for cell in river_cells:
        river_mask[cell.y, cell.x] = True

    tile_rivers = tiles.mask(TileKind.RIVER)
    if np.any(river_mask & ~tile_rivers):
        result.add_error("River cells were overwritten by biome tiles")
    if np.any(tile_rivers & ~river_mask):
        result.add_error("Cells marked river that no river carved")


def _check_brackets(
    height_field: NDArray[np.float64],
    tiles: TileAssignment,
    biomes: BiomeConfig,
    result: ValidationResult,
) -> None:
    """Check tier key <= height and intra threshold <= fraction."""
    thresholds = np.asarray(biomes.intra_thresholds, dtype=np.float64)
    mismatched = 0
    previous_key = 1.0

    for tier in build_tiers(biomes):
        mask = tiles.mask(tier.kind)
        heights = height_field[mask]
        span = previous_key - tier.key
        previous_key = tier.key

        if heights.size == 0:
            continue

        fractions = (heights - tier.key) / span if span > 0 else np.zeros_like(heights)
        chosen = thresholds[tiles.variants[mask]]
        mismatched += int(np.sum((heights < tier.key) | (chosen > fractions)))

    if mismatched:
        result.add_error(f"{mismatched} cells classified outside their tier or variant bracket")
