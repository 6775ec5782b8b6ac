"""Tile kinds and concrete tile types produced by generation."""

from enum import Enum

from pydantic import BaseModel


class TileKind(str, Enum):
    """What claimed a cell: the river pass or one of the biome tiers."""

    RIVER = "river"
    SEA = "sea"
    SWAMP = "swamp"
    FOREST = "forest"

    @property
    def is_biome(self) -> bool:
        """Whether this kind is assigned by the biome classifier."""
        return self in _BIOME_KINDS


_BIOME_KINDS = frozenset({
    TileKind.SEA,
    TileKind.SWAMP,
    TileKind.FOREST,
})


class TileType(BaseModel, frozen=True):
    """Concrete tile identifier handed to the renderer.

    River tiles carry no variant index.
    """

    kind: TileKind
    variant_index: int | None = None
    tile_id: str
