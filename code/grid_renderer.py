"""Render a tile grid to plain text."""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional

from layout_geometry import Rect, TilePos
from tiles import TileKind


class GridRendererMixin:
    """Provides drawing helpers for visualizing a finished layout."""

    bounds: Rect
    get_cell: Callable[[int, int], TileKind]

    def render_rows(self, highlight: Optional[Iterable[TilePos]] = None) -> List[str]:
        """Return one string per grid row, top row (largest y) first.

        Tiles listed in ``highlight`` are drawn as ``*`` so individual doors or
        rooms can be picked out while debugging.
        """
        marked = set(highlight or ())
        rows: List[str] = []
        for y in range(self.bounds.max_y - 1, self.bounds.y - 1, -1):
            chars = []
            for x in range(self.bounds.x, self.bounds.max_x):
                if TilePos(x, y) in marked:
                    chars.append("*")
                else:
                    chars.append(self.get_cell(x, y).glyph)
            rows.append("".join(chars))
        return rows

    def print_grid(self, horizontal_sep: str = "") -> None:
        """Prints the grid to the console."""
        for row in self.render_rows():
            print(horizontal_sep.join(row))
