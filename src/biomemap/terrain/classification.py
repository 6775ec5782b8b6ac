"""Biome classification: tier and intra-biome variant from cell height."""

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
import structlog
from numpy.typing import NDArray

from ..exceptions import ClassificationError
from ..tile_types import TileKind, TileType
from ..types import Position
from .config import BiomeConfig

logger = structlog.get_logger()

# Sentinel variant index stored for river cells
_NO_VARIANT = -1


@dataclass(frozen=True)
class ThresholdTier:
    """A height band owning one tile variant per intra-biome threshold."""

    kind: TileKind
    key: float
    variants: tuple[str, ...]


def build_tiers(config: BiomeConfig) -> list[ThresholdTier]:
    """Build the tier list sorted by descending key.

    The sea tier always sits at key 0 so every height in [0, 1] falls in
    some tier. Equal keys keep forest before swamp.
    """
    tiers = [
        ThresholdTier(TileKind.FOREST, config.forest_threshold, tuple(config.forest_tiles)),
        ThresholdTier(TileKind.SWAMP, config.swamp_threshold, tuple(config.swamp_tiles)),
        ThresholdTier(TileKind.SEA, 0.0, tuple(config.sea_tiles)),
    ]
    return sorted(tiers, key=lambda tier: tier.key, reverse=True)


def _kind_value(kind: TileKind) -> int:
    """Convert TileKind to the uint8 code stored in TileAssignment."""
    mapping = {
        TileKind.RIVER: 0,
        TileKind.SEA: 1,
        TileKind.SWAMP: 2,
        TileKind.FOREST: 3,
    }
    return mapping[kind]


def kind_value_to_type(value: int) -> TileKind:
    """Convert a uint8 code back to TileKind."""
    mapping = {
        0: TileKind.RIVER,
        1: TileKind.SEA,
        2: TileKind.SWAMP,
        3: TileKind.FOREST,
    }
    return mapping[value]


def _bracket(height: float, tiers: list[ThresholdTier]) -> tuple[ThresholdTier, float] | None:
    """Find the first tier with key <= height and the height's fraction within it."""
    previous_key = 1.0
    for tier in tiers:
        if tier.key <= height:
            span = previous_key - tier.key
            fraction = (height - tier.key) / span if span > 0 else 0.0
            return tier, fraction
        previous_key = tier.key
    return None


def classify_height(
    height: float,
    tiers: list[ThresholdTier],
    intra_thresholds: list[float],
    x: int = -1,
    y: int = -1,
) -> TileType:
    """Classify a single height into a tile type.

    Args:
        height: Cell height in [0, 1].
        tiers: Tiers sorted by descending key.
        intra_thresholds: Descending variant cutoffs.
        x: Cell x, used only in error reports.
        y: Cell y, used only in error reports.

    Returns:
        TileType with the tier kind, variant index and tile identifier.

    Raises:
        ClassificationError: If no tier or no intra threshold matches.
    """
    bracket = _bracket(height, tiers)
    if bracket is None:
        raise ClassificationError(x, y, height, "no tier covers this height")

    tier, fraction = bracket
    for index, threshold in enumerate(intra_thresholds):
        if threshold <= fraction:
            return TileType(kind=tier.kind, variant_index=index, tile_id=tier.variants[index])

    raise ClassificationError(
        x, y, height, f"fraction {fraction:.4f} of {tier.kind.value} tier below every intra threshold"
    )


def classify_cell(
    height_field: NDArray[np.float64],
    x: int,
    y: int,
    tiers: list[ThresholdTier],
    intra_thresholds: list[float],
) -> TileType:
    """Classify the cell at (x, y) from its own height."""
    return classify_height(float(height_field[y, x]), tiers, intra_thresholds, x, y)


class TileAssignment:
    """Per-cell output: river marker or (tier, variant) for every cell.

    Stored as two compact arrays indexed [y, x]: a kind code and a
    variant index (-1 for rivers).
    """

    def __init__(
        self,
        kinds: NDArray[np.uint8],
        variants: NDArray[np.int16],
        tiers: list[ThresholdTier],
        river_tile: str,
    ):
        self.kinds = kinds
        self.variants = variants
        self.river_tile = river_tile
        self._variants_by_kind = {tier.kind: tier.variants for tier in tiers}

    @property
    def width(self) -> int:
        return self.kinds.shape[1]

    @property
    def height(self) -> int:
        return self.kinds.shape[0]

    def tile_at(self, position: Position) -> TileType:
        """Tile type at a position."""
        kind = kind_value_to_type(int(self.kinds[position.y, position.x]))
        if not kind.is_biome:
            return TileType(kind=kind, tile_id=self.river_tile)

        index = int(self.variants[position.y, position.x])
        return TileType(kind=kind, variant_index=index, tile_id=self._variants_by_kind[kind][index])

    def __iter__(self) -> Iterator[tuple[Position, TileType]]:
        for x in range(self.width):
            for y in range(self.height):
                position = Position(x=x, y=y)
                yield position, self.tile_at(position)

    def mask(self, kind: TileKind) -> NDArray[np.bool_]:
        """Boolean mask of cells of one kind."""
        return self.kinds == _kind_value(kind)

    def counts(self) -> dict[TileKind, int]:
        """Number of cells of each kind."""
        return {kind: int(np.sum(self.mask(kind))) for kind in TileKind}


def classify_biomes(
    height_field: NDArray[np.float64],
    occupancy: NDArray[np.bool_],
    tiers: list[ThresholdTier],
    intra_thresholds: list[float],
    river_cells: set[Position],
    river_tile: str,
) -> TileAssignment:
    """Assign a tile to every cell.

    River cells keep the river marker. Every unoccupied cell is
    classified from its own height and then marked occupied, in x-major
    order.

    Args:
        height_field: 2D height array indexed [y, x].
        occupancy: Occupancy grid after the river pass, mutated in place.
        tiers: Tiers sorted by descending key.
        intra_thresholds: Descending variant cutoffs.
        river_cells: Cells claimed by rivers.
        river_tile: Tile identifier for river cells.

    Returns:
        TileAssignment covering the whole map.

    Raises:
        ClassificationError: On the first cell that cannot be classified.
        ValueError: If the occupied cells differ from the river cells.
    """
    height, width = height_field.shape

    river_mask = np.zeros((height, width), dtype=bool)
    for cell in river_cells:
        river_mask[cell.y, cell.x] = True
    if not np.array_equal(river_mask, occupancy):
        raise ValueError("Occupancy grid does not match the carved river cells")

    kinds = np.full((height, width), _kind_value(TileKind.RIVER), dtype=np.uint8)
    variants = np.full((height, width), _NO_VARIANT, dtype=np.int16)

    classified = 0
    for x in range(width):
        for y in range(height):
            if occupancy[y, x]:
                continue

            tile = classify_cell(height_field, x, y, tiers, intra_thresholds)
            kinds[y, x] = _kind_value(tile.kind)
            variants[y, x] = tile.variant_index
            occupancy[y, x] = True
            classified += 1

    logger.info("biomes_classified", cells=classified, rivers=len(river_cells))
    return TileAssignment(kinds, variants, tiers, river_tile)
