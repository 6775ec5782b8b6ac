"""Tests for biome classification."""

import numpy as np
import pytest

from biomemap.exceptions import ClassificationError
from biomemap.terrain.classification import (
    _bracket,
    build_tiers,
    classify_biomes,
    classify_cell,
    classify_height,
    kind_value_to_type,
)
from biomemap.terrain.config import BiomeConfig
from biomemap.tile_types import TileKind
from biomemap.types import Position


class TestBuildTiers:
    """Tests for tier ordering."""

    def test_descending_keys(self, biome_config: BiomeConfig) -> None:
        tiers = build_tiers(biome_config)
        assert [tier.kind for tier in tiers] == [TileKind.FOREST, TileKind.SWAMP, TileKind.SEA]
        assert [tier.key for tier in tiers] == [0.6, 0.35, 0.0]

    def test_sea_tier_at_zero(self) -> None:
        tiers = build_tiers(BiomeConfig(forest_threshold=0.9, swamp_threshold=0.1))
        assert tiers[-1].kind == TileKind.SEA
        assert tiers[-1].key == 0.0

    def test_equal_keys_keep_forest_first(self) -> None:
        tiers = build_tiers(BiomeConfig(forest_threshold=0.5, swamp_threshold=0.5))
        assert tiers[0].kind == TileKind.FOREST
        assert tiers[1].kind == TileKind.SWAMP


class TestClassifyHeight:
    """Tests for single-height classification."""

    @pytest.mark.parametrize(
        ("height", "kind", "index", "tile_id"),
        [
            (0.95, TileKind.FOREST, 0, "forest_peak"),
            (0.6, TileKind.FOREST, 3, "forest_edge"),
            (0.5, TileKind.SWAMP, 1, "swamp"),
            (0.2, TileKind.SEA, 1, "sea"),
            (0.0, TileKind.SEA, 3, "sea_abyss"),
        ],
    )
    def test_default_tiers(
        self, biome_config: BiomeConfig, height: float, kind: TileKind, index: int, tile_id: str
    ) -> None:
        tiers = build_tiers(biome_config)
        tile = classify_height(height, tiers, biome_config.intra_thresholds)
        assert tile.kind == kind
        assert tile.variant_index == index
        assert tile.tile_id == tile_id

    def test_tier_boundary_inclusive(self, biome_config: BiomeConfig) -> None:
        """A height equal to a tier key belongs to that tier."""
        tiers = build_tiers(biome_config)
        tile = classify_height(0.35, tiers, biome_config.intra_thresholds)
        assert tile.kind == TileKind.SWAMP

    def test_zero_width_band(self) -> None:
        """A band of zero width yields fraction 0 instead of dividing by zero."""
        config = BiomeConfig(forest_threshold=1.0)
        tiers = build_tiers(config)
        tile = classify_height(1.0, tiers, config.intra_thresholds)
        assert tile.kind == TileKind.FOREST
        assert tile.variant_index == 3

    def test_equal_keys_fraction(self) -> None:
        """With coincident forest and swamp keys, lower heights fall through to sea."""
        config = BiomeConfig(forest_threshold=0.5, swamp_threshold=0.5)
        tiers = build_tiers(config)
        assert classify_height(0.5, tiers, config.intra_thresholds).kind == TileKind.FOREST
        tile = classify_height(0.4, tiers, config.intra_thresholds)
        assert tile.kind == TileKind.SEA
        assert tile.variant_index == 0

    def test_no_matching_intra_threshold(self, biome_config: BiomeConfig) -> None:
        """Without a zero cutoff the bottom of a band cannot be classified."""
        tiers = build_tiers(biome_config)
        with pytest.raises(ClassificationError) as exc_info:
            classify_height(0.0, tiers, [0.75, 0.5], x=4, y=2)
        assert exc_info.value.x == 4
        assert exc_info.value.y == 2
        assert exc_info.value.height == 0.0

    def test_partial_thresholds_above_cutoff(self, biome_config: BiomeConfig) -> None:
        tiers = build_tiers(biome_config)
        tile = classify_height(0.95, tiers, [0.75, 0.5])
        assert tile.variant_index == 0

    def test_brackets_random_heights(self, biome_config: BiomeConfig) -> None:
        """Every chosen tier and cutoff lies at or below the height and its fraction."""
        tiers = build_tiers(biome_config)
        thresholds = biome_config.intra_thresholds
        rng = np.random.default_rng(3)

        for height in rng.random(500):
            tile = classify_height(float(height), tiers, thresholds)
            tier, fraction = _bracket(float(height), tiers)
            assert tier.kind == tile.kind
            assert tier.key <= height
            assert thresholds[tile.variant_index] <= fraction
            # First match: the previous cutoff (if any) is above the fraction
            if tile.variant_index > 0:
                assert thresholds[tile.variant_index - 1] > fraction


class TestClassifyCell:
    """Tests for classifying a cell by position."""

    def test_reads_height_at_yx(self, biome_config: BiomeConfig) -> None:
        field = np.zeros((2, 3))
        field[1, 2] = 0.95
        tiers = build_tiers(biome_config)
        assert classify_cell(field, 2, 1, tiers, biome_config.intra_thresholds).kind == TileKind.FOREST
        assert classify_cell(field, 1, 1, tiers, biome_config.intra_thresholds).kind == TileKind.SEA

    def test_error_reports_position(self, biome_config: BiomeConfig) -> None:
        field = np.zeros((2, 3))
        tiers = build_tiers(biome_config)
        with pytest.raises(ClassificationError, match=r"\(2, 1\)"):
            classify_cell(field, 2, 1, tiers, [0.5])


class TestClassifyBiomes:
    """Tests for the whole-map biome fill."""

    def test_flat_field_single_variant(self, flat_field: np.ndarray) -> None:
        """Every cell of a flat field gets the same tile."""
        config = BiomeConfig(forest_threshold=0.6, swamp_threshold=0.3)
        occupancy = np.zeros(flat_field.shape, dtype=bool)
        tiles = classify_biomes(
            flat_field, occupancy, build_tiers(config), config.intra_thresholds, set(), "river"
        )
        assert np.all(tiles.mask(TileKind.SWAMP))
        assert np.all(tiles.variants == 1)
        assert occupancy.all()

    def test_river_cells_preserved(self, biome_config: BiomeConfig) -> None:
        field = np.full((3, 4), 0.7)
        occupancy = np.zeros(field.shape, dtype=bool)
        river_cells = {Position(x=1, y=0), Position(x=2, y=1)}
        for cell in river_cells:
            occupancy[cell.y, cell.x] = True

        tiles = classify_biomes(
            field, occupancy, build_tiers(biome_config), biome_config.intra_thresholds, river_cells, "water"
        )

        for cell in river_cells:
            tile = tiles.tile_at(cell)
            assert tile.kind == TileKind.RIVER
            assert tile.tile_id == "water"
            assert tile.variant_index is None
        assert tiles.counts()[TileKind.RIVER] == 2
        assert tiles.counts()[TileKind.FOREST] == 10
        assert occupancy.all()

    def test_occupancy_must_match_river_cells(self, biome_config: BiomeConfig) -> None:
        """An occupied cell that no river carved is rejected."""
        field = np.full((2, 2), 0.7)
        occupancy = np.zeros(field.shape, dtype=bool)
        occupancy[0, 1] = True
        with pytest.raises(ValueError, match="river cells"):
            classify_biomes(
                field, occupancy, build_tiers(biome_config), biome_config.intra_thresholds, set(), "river"
            )

    def test_failure_propagates(self, biome_config: BiomeConfig) -> None:
        field = np.zeros((2, 2))
        occupancy = np.zeros(field.shape, dtype=bool)
        with pytest.raises(ClassificationError):
            classify_biomes(field, occupancy, build_tiers(biome_config), [0.5], set(), "river")


class TestTileAssignment:
    """Tests for the tile assignment container."""

    def test_iterates_x_major(self, biome_config: BiomeConfig) -> None:
        field = np.full((2, 3), 0.5)
        occupancy = np.zeros(field.shape, dtype=bool)
        tiles = classify_biomes(
            field, occupancy, build_tiers(biome_config), biome_config.intra_thresholds, set(), "river"
        )

        positions = [position for position, _ in tiles]
        assert positions[:3] == [Position(x=0, y=0), Position(x=0, y=1), Position(x=1, y=0)]
        assert len(positions) == 6
        assert (tiles.width, tiles.height) == (3, 2)

    def test_kind_codes_cover_every_kind(self) -> None:
        assert {kind_value_to_type(code) for code in range(4)} == set(TileKind)
