"""Configuration container for BSP layout generation."""

from __future__ import annotations

from dataclasses import dataclass

from layout_constants import (
    DEFAULT_ADJUSTED_MIN_ROOM_SIZE,
    DEFAULT_CORRIDOR_WIDTH,
    DEFAULT_FREE_SPACE_BUFFER,
    DEFAULT_MIN_ITERATIONS_BEFORE_CHANCE_APPLIES,
    DEFAULT_MIN_ROOM_SIZE,
    DEFAULT_SPLIT_CHANCE,
    MIN_CORRIDOR_WIDTH,
    MIN_FREE_SPACE_BUFFER,
    SPLIT_GRID_STEP,
)
from layout_geometry import Rect


@dataclass
class LayoutConfig:
    """Aggregates all tunable parameters for layout generation."""

    width: int
    height: int
    origin_x: int = 0
    origin_y: int = 0

    # Width of the corridor band cut between the two children of a split.
    corridor_width: int = DEFAULT_CORRIDOR_WIDTH
    # Smallest room edge while corridors are still being carved.
    min_room_size: int = DEFAULT_MIN_ROOM_SIZE
    # Smallest room edge once a region is too small for a corridor and falls back to shared walls.
    adjusted_min_room_size: int = DEFAULT_ADJUSTED_MIN_ROOM_SIZE
    # Probability that a node stops splitting early, once enough nodes have been built.
    split_chance: float = DEFAULT_SPLIT_CHANCE
    # Number of nodes that must exist before split_chance is applied.
    min_iterations_before_chance_applies: int = DEFAULT_MIN_ITERATIONS_BEFORE_CHANCE_APPLIES
    # Margin between the grid edge and the outer dungeon wall.
    free_space_buffer: int = DEFAULT_FREE_SPACE_BUFFER

    split_grid_step: int = SPLIT_GRID_STEP
    # Cut extra corridor doors after stitching so no room is left on a cut-off corridor.
    bridge_components: bool = True
    random_seed: int | None = None
    collect_metrics: bool = False

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("LayoutConfig width and height must be positive")
        if self.corridor_width < 0:
            raise ValueError("LayoutConfig corridor_width cannot be negative")
        if 0 < self.corridor_width < MIN_CORRIDOR_WIDTH:
            raise ValueError(
                f"LayoutConfig corridor_width must be 0 or at least {MIN_CORRIDOR_WIDTH}"
            )
        if self.min_room_size <= 0:
            raise ValueError("LayoutConfig min_room_size must be positive")
        if self.adjusted_min_room_size <= 0:
            raise ValueError("LayoutConfig adjusted_min_room_size must be positive")
        if not (0.0 <= self.split_chance <= 1.0):
            raise ValueError("LayoutConfig split_chance must lie within [0, 1]")
        if self.min_iterations_before_chance_applies < 0:
            raise ValueError(
                "LayoutConfig min_iterations_before_chance_applies must be non-negative"
            )
        if self.free_space_buffer < MIN_FREE_SPACE_BUFFER:
            raise ValueError(
                f"LayoutConfig free_space_buffer must be at least {MIN_FREE_SPACE_BUFFER}"
            )
        if self.split_grid_step <= 0:
            raise ValueError("LayoutConfig split_grid_step must be positive")

        self.split_chance = float(self.split_chance)

        root = self.root_bounds
        smallest_room = min(self.min_room_size, self.adjusted_min_room_size)
        if root.width < smallest_room or root.height < smallest_room:
            raise ValueError(
                f"Dungeon of {self.width}x{self.height} with buffer {self.free_space_buffer}"
                f" cannot hold a room of size {smallest_room}"
            )

    @classmethod
    def from_bounds(cls, bounds: Rect, **kwargs) -> "LayoutConfig":
        return cls(
            width=bounds.width,
            height=bounds.height,
            origin_x=bounds.x,
            origin_y=bounds.y,
            **kwargs,
        )

    @property
    def dungeon_bounds(self) -> Rect:
        """Whole area covered by the grid, free-space buffer included."""
        return Rect(self.origin_x, self.origin_y, self.width, self.height)

    @property
    def root_bounds(self) -> Rect:
        """Area handed to the root partition node."""
        return self.dungeon_bounds.shrink(self.free_space_buffer)
