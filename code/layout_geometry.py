"""Geometry helpers for rectangles, tile positions, and wall sides."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple


class Direction(Enum):
    """Compass directions with unit vectors on the tile grid (y grows upward)."""

    NORTH = (0, 1)
    EAST = (1, 0)
    SOUTH = (0, -1)
    WEST = (-1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    def opposite(self) -> Direction:
        return Direction.from_tuple((-self.dx, -self.dy))

    @classmethod
    def from_tuple(cls, value: Tuple[int, int]) -> Direction:
        try:
            return cls(value)
        except ValueError as exc:
            raise ValueError(f"Unsupported direction {value}") from exc


class Side(Enum):
    """Wall of a room, relative to the room itself rather than the world."""

    TOP = "Top"
    BOTTOM = "Bottom"
    LEFT = "Left"
    RIGHT = "Right"

    @property
    def outward(self) -> Direction:
        """Direction pointing away from the room through this wall."""
        return _SIDE_OUTWARD[self]

    @property
    def dx(self) -> int:
        return self.outward.dx

    @property
    def dy(self) -> int:
        return self.outward.dy

    @property
    def opening_direction(self) -> Direction:
        """Direction a door visual on this wall opens toward (into the room)."""
        return self.outward.opposite()


_SIDE_OUTWARD = {
    Side.TOP: Direction.NORTH,
    Side.BOTTOM: Direction.SOUTH,
    Side.LEFT: Direction.WEST,
    Side.RIGHT: Direction.EAST,
}


class SplitAxis(Enum):
    """Orientation of the cut made when a partition node is split."""

    VERTICAL = 0  # Cut along x: side-by-side children, corridor runs vertically.
    HORIZONTAL = 1  # Cut along y: stacked children, corridor runs horizontally.


@dataclass(frozen=True, order=True)
class TilePos:
    """Integer tile coordinate."""

    x: int
    y: int

    def __iter__(self):
        yield self.x
        yield self.y

    def __getitem__(self, index: int) -> int:
        if index == 0:
            return self.x
        if index == 1:
            return self.y
        raise IndexError("TilePos only supports two coordinates")

    def offset(self, dx: int, dy: int) -> TilePos:
        return TilePos(self.x + dx, self.y + dy)

    def to_tuple(self) -> Tuple[int, int]:
        return self.x, self.y

    @classmethod
    def from_tuple(cls, value: Tuple[int, int]) -> TilePos:
        return cls(*value)


@dataclass(frozen=True)
class Rect:
    """Immutable axis-aligned rectangle using integer tile coordinates."""

    x: int
    y: int
    width: int
    height: int

    @property
    def max_x(self) -> int:
        """Right edge (exclusive)."""
        return self.x + self.width

    @property
    def max_y(self) -> int:
        """Top edge (exclusive)."""
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def overlaps(self, other: Rect) -> bool:
        """Return True when the interior of this rect intersects another rect."""
        if self.max_x <= other.x or other.max_x <= self.x:
            return False
        if self.max_y <= other.y or other.max_y <= self.y:
            return False
        return True

    def expand(self, margin: int) -> Rect:
        """Return a rect grown outward by ``margin`` tiles on all sides."""
        if margin == 0:
            return self
        return Rect(
            self.x - margin,
            self.y - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )

    def shrink(self, margin: int) -> Rect:
        """Return a rect pulled inward by ``margin`` tiles on all sides."""
        return self.expand(-margin)

    def contains(self, point: TilePos) -> bool:
        """Return True if the provided tile lies inside this rect."""
        return self.x <= point.x < self.max_x and self.y <= point.y < self.max_y

    def contains_rect(self, other: Rect) -> bool:
        return (
            self.x <= other.x
            and self.y <= other.y
            and other.max_x <= self.max_x
            and other.max_y <= self.max_y
        )

    def iter_tiles(self) -> Iterator[TilePos]:
        for ty in range(self.y, self.max_y):
            for tx in range(self.x, self.max_x):
                yield TilePos(tx, ty)

    def to_tuple(self) -> Tuple[int, int, int, int]:
        """Return the rect as an ``(x, y, width, height)`` tuple."""
        return self.x, self.y, self.width, self.height
