"""Tile kinds stored in the layout grid."""

from __future__ import annotations

from enum import Enum


class TileKind(Enum):
    """Kinds of tile the generator can write into a grid cell."""

    EMPTY = 0  # Not yet drawn.
    WALL = 1
    FLOOR = 2
    DOOR = 3
    CORRIDOR = 4
    GRASS = 5  # Background outside the dungeon walls.

    @property
    def glyph(self) -> str:
        return _GLYPHS[self]

    @property
    def walkable(self) -> bool:
        return self in WALKABLE_TILES


_GLYPHS = {
    TileKind.EMPTY: " ",
    TileKind.WALL: "#",
    TileKind.FLOOR: ".",
    TileKind.DOOR: "+",
    TileKind.CORRIDOR: "░",
    TileKind.GRASS: '"',
}

WALKABLE_TILES = frozenset((TileKind.FLOOR, TileKind.CORRIDOR, TileKind.DOOR))
