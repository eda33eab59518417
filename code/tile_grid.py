"""Dense tile grid with the drawing primitives used by layout generation."""

from __future__ import annotations

from typing import Iterator, List, Tuple

from grid_renderer import GridRendererMixin
from layout_geometry import Rect, TilePos
from tiles import TileKind


class TileGrid(GridRendererMixin):
    """Stores one TileKind per cell of ``bounds``.

    Cells are addressed with world coordinates, so a grid whose bounds start at
    a non-zero origin is indexed the same way as the rectangles drawn onto it.
    Any access outside ``bounds`` raises ``IndexError``.
    """

    def __init__(self, bounds: Rect) -> None:
        if bounds.is_empty:
            raise ValueError(f"Grid bounds must have positive size, got {bounds.to_tuple()}")
        self.bounds = bounds
        self._cells: List[List[TileKind]] = [
            [TileKind.EMPTY for _ in range(bounds.width)] for _ in range(bounds.height)
        ]

    @property
    def width(self) -> int:
        return self.bounds.width

    @property
    def height(self) -> int:
        return self.bounds.height

    def in_bounds(self, x: int, y: int) -> bool:
        return self.bounds.x <= x < self.bounds.max_x and self.bounds.y <= y < self.bounds.max_y

    def _check(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"Tile {(x, y)} is outside grid bounds {self.bounds.to_tuple()}")

    def get_cell(self, x: int, y: int) -> TileKind:
        self._check(x, y)
        return self._cells[y - self.bounds.y][x - self.bounds.x]

    def set_cell(self, x: int, y: int, kind: TileKind) -> None:
        self._check(x, y)
        self._cells[y - self.bounds.y][x - self.bounds.x] = kind

    def fill_rectangle(self, rect: Rect, kind: TileKind) -> None:
        """Set every cell of ``rect`` to ``kind``, overwriting what was there."""
        if rect.is_empty:
            return
        self._check(rect.x, rect.y)
        self._check(rect.max_x - 1, rect.max_y - 1)
        for ty in range(rect.y, rect.max_y):
            row = self._cells[ty - self.bounds.y]
            for tx in range(rect.x, rect.max_x):
                row[tx - self.bounds.x] = kind

    def draw_perimeter_walls(self, rect: Rect) -> None:
        """Set the one-cell ring immediately outside ``rect`` to WALL."""
        for tx in range(rect.x - 1, rect.max_x + 1):
            self.set_cell(tx, rect.y - 1, TileKind.WALL)
            self.set_cell(tx, rect.max_y, TileKind.WALL)
        for ty in range(rect.y - 1, rect.max_y + 1):
            self.set_cell(rect.x - 1, ty, TileKind.WALL)
            self.set_cell(rect.max_x, ty, TileKind.WALL)

    def clear(self) -> None:
        for row in self._cells:
            for i in range(len(row)):
                row[i] = TileKind.EMPTY

    def iter_cells(self) -> Iterator[Tuple[TilePos, TileKind]]:
        for row_idx, row in enumerate(self._cells):
            for col_idx, kind in enumerate(row):
                yield TilePos(self.bounds.x + col_idx, self.bounds.y + row_idx), kind

    def count(self, kind: TileKind) -> int:
        return sum(row.count(kind) for row in self._cells)

    def snapshot(self) -> Tuple[Tuple[TileKind, ...], ...]:
        """Return an immutable copy of the cells, row by row from the lowest y."""
        return tuple(tuple(row) for row in self._cells)
