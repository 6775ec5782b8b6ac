"""Tests for core grid types."""

import pytest

from biomemap.tile_types import TileKind
from biomemap.types import DIRECTION_DELTAS, Direction, Position


class TestDirection:
    """Tests for compass directions."""

    def test_deltas_cover_all_directions(self) -> None:
        """Every direction has a unit delta."""
        assert set(DIRECTION_DELTAS) == set(Direction)
        for dx, dy in DIRECTION_DELTAS.values():
            assert max(abs(dx), abs(dy)) == 1

    def test_north_is_negative_y(self) -> None:
        """+Y points south."""
        assert DIRECTION_DELTAS[Direction.NORTH] == (0, -1)
        assert DIRECTION_DELTAS[Direction.SOUTH] == (0, 1)

    def test_rotated_clockwise(self) -> None:
        """One clockwise step from north is northeast."""
        assert Direction.NORTH.rotated(1) == Direction.NORTHEAST
        assert Direction.EAST.rotated(2) == Direction.SOUTH

    def test_rotated_wraps(self) -> None:
        """Rotation wraps around the compass."""
        assert Direction.NORTH.rotated(-1) == Direction.NORTHWEST
        assert Direction.NORTHWEST.rotated(1) == Direction.NORTH
        assert Direction.SOUTH.rotated(8) == Direction.SOUTH


class TestPosition:
    """Tests for Position."""

    def test_offset(self) -> None:
        """Offset applies the direction delta."""
        assert Position(x=2, y=2).offset(Direction.SOUTHWEST) == Position(x=1, y=3)

    def test_hashable(self) -> None:
        """Equal positions collapse in a set."""
        assert len({Position(x=1, y=1), Position(x=1, y=1)}) == 1

    def test_distance(self) -> None:
        assert Position(x=0, y=0).distance_to(Position(x=3, y=4)) == pytest.approx(5.0)

    def test_within(self) -> None:
        """Bounds check is inclusive of 0 and exclusive of size."""
        assert Position(x=0, y=0).within(3, 3)
        assert Position(x=2, y=2).within(3, 3)
        assert not Position(x=3, y=0).within(3, 3)
        assert not Position(x=0, y=-1).within(3, 3)

    def test_frozen(self) -> None:
        """Positions are immutable."""
        pos = Position(x=1, y=1)
        with pytest.raises(Exception):
            pos.x = 5  # type: ignore[misc]

    def test_str(self) -> None:
        assert str(Position(x=4, y=9)) == "(4, 9)"


class TestTileKind:
    """Tests for tile kinds."""

    def test_biome_kinds(self) -> None:
        """Only the classifier tiers are biomes."""
        assert {kind for kind in TileKind if kind.is_biome} == {
            TileKind.SEA,
            TileKind.SWAMP,
            TileKind.FOREST,
        }
        assert not TileKind.RIVER.is_biome
